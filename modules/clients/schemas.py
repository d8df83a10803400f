import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, description="Nome do cliente")
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    document: Optional[str] = Field(None, description="CPF ou CNPJ")
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = Field(None, max_length=2, description="UF")
    zip_code: Optional[str] = None

    @field_validator("document")
    @classmethod
    def digits_only(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        digits = re.sub(r"\D", "", v)
        if digits and len(digits) not in (11, 14):
            raise ValueError("CPF deve ter 11 dígitos e CNPJ 14 dígitos")
        return digits or None

    @field_validator("state")
    @classmethod
    def upper_state(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class ClientCreate(ClientBase):
    pass


class ClientUpdate(ClientBase):
    pass


class ClientRead(ClientBase):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ClientImportResult(BaseModel):
    imported: int
    skipped_lines: List[int] = Field(default_factory=list)
