from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from modules.products.types import ProductType

ProductId = Union[int, str]


class ComponentEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    component_id: ProductId
    quantity: float


class CatalogItem(BaseModel):
    """One product as seen by the rollup: an immutable snapshot row."""

    model_config = ConfigDict(frozen=True)

    id: ProductId
    name: str = ""
    type: ProductType
    unit: str = "un"
    unit_cost: float = Field(0.0, ge=0, allow_inf_nan=False)
    components: Tuple[ComponentEdge, ...] = ()


class IssueKind(str, Enum):
    CYCLE = "cycle"
    MISSING_COMPONENT = "missing_component"
    INVALID_QUANTITY = "invalid_quantity"


class CostIssue(BaseModel):
    kind: IssueKind
    product_id: ProductId
    parent_id: Optional[ProductId] = None
    message: str


class CostNode(BaseModel):
    product_id: ProductId
    name: Optional[str] = None
    type: Optional[ProductType] = None
    unit: Optional[str] = None
    quantity: float = 1.0  # per unit of the parent
    unit_cost: float = 0.0
    extended_cost: float = 0.0
    issue: Optional[IssueKind] = None
    children: List["CostNode"] = Field(default_factory=list)


class CostBreakdown(BaseModel):
    root: CostNode
    issues: List[CostIssue] = Field(default_factory=list)

    @property
    def unit_cost(self) -> float:
        return self.root.unit_cost


class MaterialRequirement(BaseModel):
    product_id: ProductId
    name: Optional[str] = None
    unit: Optional[str] = None
    quantity: float = 0.0
    unit_cost: float = 0.0
    total_cost: float = 0.0
    cost_share_pct: float = 0.0
