import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from modules.sales.types import PaymentMethod, PurchaseStatus, SaleStatus


class SaleItemCreate(BaseModel):
    product_id: int
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)


class SaleItemRead(SaleItemCreate):
    id: int
    product_name: str
    total: float


class SaleCreate(BaseModel):
    date: datetime.date
    client_id: Optional[int] = None
    status: SaleStatus = SaleStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    items: List[SaleItemCreate] = Field(..., min_length=1)


class SaleUpdate(SaleCreate):
    pass


class SaleRead(BaseModel):
    id: int
    date: datetime.date
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    status: SaleStatus
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    total: float
    items: List[SaleItemRead] = Field(default_factory=list)


class PurchaseItemCreate(BaseModel):
    product_id: int
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)


class PurchaseItemRead(PurchaseItemCreate):
    id: int
    product_name: str
    total: float


class PurchaseCreate(BaseModel):
    date: datetime.date
    supplier_id: Optional[int] = None
    # Defaults to the registered supplier's name
    supplier_name: Optional[str] = None
    status: PurchaseStatus = PurchaseStatus.PENDING
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    items: List[PurchaseItemCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_supplier(self):
        if self.supplier_name is not None:
            self.supplier_name = self.supplier_name.strip() or None
        if self.supplier_id is None and not self.supplier_name:
            raise ValueError("Informe o fornecedor")
        return self


class PurchaseUpdate(PurchaseCreate):
    pass


class PurchaseRead(BaseModel):
    id: int
    date: datetime.date
    supplier_id: Optional[int] = None
    supplier_name: str
    status: PurchaseStatus
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    total: float
    items: List[PurchaseItemRead] = Field(default_factory=list)
