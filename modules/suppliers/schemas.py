import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1, description="Razão social ou nome fantasia")
    document: Optional[str] = Field(None, description="CNPJ ou CPF")
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nome do fornecedor é obrigatório")
        return v

    @field_validator("document")
    @classmethod
    def digits_only(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        digits = re.sub(r"\D", "", v)
        if digits and len(digits) not in (11, 14):
            raise ValueError("CNPJ deve ter 14 dígitos e CPF 11 dígitos")
        return digits or None


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(SupplierBase):
    pass


class SupplierRead(SupplierBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
