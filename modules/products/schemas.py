from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.products.types import ProductType


class ComponentCreate(BaseModel):
    component_id: int = Field(..., description="Produto usado como componente")
    quantity: float = Field(..., ge=0, description="Quantidade por unidade do produto pai")


class ComponentRead(ComponentCreate):
    component_name: Optional[str] = None


class ProductBase(BaseModel):
    name: str = Field(..., description="Nome do produto")
    description: Optional[str] = None
    category: str = "Geral"
    product_type: ProductType
    unit: str = "un"
    cost_price: float = Field(0.0, ge=0, description="Preço de custo direto")
    sale_price: Optional[float] = Field(None, ge=0, description="Preço de venda")
    current_stock: float = Field(0.0, ge=0)
    min_stock: int = Field(0, ge=0)
    supplier: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v


class ProductCreate(ProductBase):
    profit_margin: Optional[float] = Field(None, ge=0, le=99, description="Margem (%) para calcular o preço de venda")
    components: List[ComponentCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_components(self):
        if self.product_type == ProductType.RAW_MATERIAL and self.components:
            raise ValueError("Matéria-prima não pode ter componentes")
        return self


class ProductUpdate(ProductCreate):
    pass


class ProductRead(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unit_cost: float = Field(..., description="Custo unitário calculado pela composição")
    components: List[ComponentRead] = Field(default_factory=list)


class ImportResult(BaseModel):
    imported: int
    skipped_lines: List[int] = Field(default_factory=list)
