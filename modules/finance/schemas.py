import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCreate(BaseModel):
    type: TransactionType
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    amount: float = Field(..., gt=0)
    date: datetime.date
    project_id: Optional[int] = None


class TransactionUpdate(TransactionCreate):
    pass


class TransactionRead(TransactionCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
