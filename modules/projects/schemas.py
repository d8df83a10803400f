from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from modules.projects.types import ProjectStatus


class ProjectLineCreate(BaseModel):
    product_id: int
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(0.0, ge=0)


class ProjectLineRead(ProjectLineCreate):
    id: int
    product_name: str
    total_price: float


class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1)
    client_id: Optional[int] = None
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.QUOTE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    labor_cost: float = Field(0.0, ge=0)
    profit_margin: Optional[float] = Field(None, ge=0, le=99)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("A data de entrega deve ser posterior à data de início")
        return self


class ProjectCreate(ProjectBase):
    # Sum of the line totals when omitted
    budget: Optional[float] = Field(None, ge=0)
    lines: List[ProjectLineCreate] = Field(default_factory=list)


class ProjectRead(ProjectBase):
    id: int
    client_name: Optional[str] = None
    budget: float
    lines: List[ProjectLineRead] = Field(default_factory=list)


class ProjectUpdate(ProjectCreate):
    pass


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus
