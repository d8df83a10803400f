import datetime
from typing import Optional

from pydantic import BaseModel, Field

from modules.inventory.types import MovementType, ReferenceType


class StockMovementCreate(BaseModel):
    product_id: int
    movement_type: MovementType
    quantity: float = Field(..., gt=0)
    unit_price: Optional[float] = Field(None, ge=0)
    reference_type: ReferenceType = ReferenceType.MANUAL
    date: Optional[datetime.date] = None
    notes: Optional[str] = None


class StockMovementRead(BaseModel):
    id: int
    product_id: int
    product_name: str
    movement_type: MovementType
    quantity: float
    unit_price: Optional[float] = None
    total_value: Optional[float] = None
    project_id: Optional[int] = None
    project_title: Optional[str] = None
    reference_type: ReferenceType
    date: datetime.date
    notes: Optional[str] = None
    resulting_stock: float
