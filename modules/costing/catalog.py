"""Build a validated catalog snapshot for the cost rollup.

Product rows reach the rollup from the database, from CSV imports and from
API payloads. This is the one place where their numbers are checked: bad
quantities and costs are clamped to zero (and logged) so the rollup itself
only ever sees well-typed, non-negative values. A record that cannot be
interpreted at all (no id, unknown product type) is rejected.
"""

import logging
import math
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from core.errors import ValidationAppException
from modules.costing.schemas import CatalogItem, ComponentEdge, ProductId
from modules.products.types import ProductType

logger = logging.getLogger(__name__)


def non_negative_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float >= 0, or None when it is not one."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def _edge_fields(raw_edge: Any) -> Tuple[Any, Any]:
    if isinstance(raw_edge, Mapping):
        return raw_edge.get("component_id"), raw_edge.get("quantity")
    if isinstance(raw_edge, ComponentEdge):
        return raw_edge.component_id, raw_edge.quantity
    component_id, quantity = raw_edge
    return component_id, quantity


def build_catalog(records: Iterable[Mapping[str, Any]]) -> Dict[ProductId, CatalogItem]:
    catalog: Dict[ProductId, CatalogItem] = {}
    for record in records:
        product_id = record.get("id")
        if product_id is None:
            raise ValidationAppException("Produto sem identificador no catálogo")
        try:
            product_type = ProductType(record.get("type"))
        except ValueError as exc:
            raise ValidationAppException(f"Tipo de produto inválido: {record.get('type')!r}") from exc

        unit_cost = non_negative_number(record.get("unit_cost"))
        if unit_cost is None:
            if product_type == ProductType.RAW_MATERIAL:
                logger.warning("Product %s: invalid unit cost %r, using 0", product_id, record.get("unit_cost"))
            unit_cost = 0.0

        edges = []
        for raw_edge in record.get("components") or ():
            component_id, quantity = _edge_fields(raw_edge)
            if component_id is None:
                logger.warning("Product %s: component without id ignored", product_id)
                continue
            clean_quantity = non_negative_number(quantity)
            if clean_quantity is None:
                logger.warning(
                    "Product %s: invalid quantity %r for component %s, using 0", product_id, quantity, component_id
                )
                clean_quantity = 0.0
            edges.append(ComponentEdge(component_id=component_id, quantity=clean_quantity))

        if product_type == ProductType.RAW_MATERIAL and edges:
            logger.warning("Product %s: raw material declares %d components, ignoring them", product_id, len(edges))
            edges = []

        if product_id in catalog:
            logger.warning("Product %s appears more than once in the catalog; keeping the last record", product_id)

        catalog[product_id] = CatalogItem(
            id=product_id,
            name=record.get("name") or "",
            type=product_type,
            unit=record.get("unit") or "un",
            unit_cost=unit_cost,
            components=tuple(edges),
        )
    return catalog
