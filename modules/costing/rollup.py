"""Bill-of-materials cost rollup.

A raw material costs its stored unit cost; any other product costs the
quantity-weighted sum of its components, recursively. The walk carries the
set of products on the current ancestor path (``visiting``). Meeting one of
them again is a cycle: that edge contributes 0. A component id that is not in
the catalog also contributes 0. Neither raises; both are logged as warnings
and handed to the optional ``on_warning`` callback.

A product reached through two unrelated branches is costed in both, since it
leaves ``visiting`` as soon as its own branch is done.

The walks keep their own stack of open products instead of recursing, so
very deep component chains cost the same as shallow ones.

All functions are pure over the ``catalog`` snapshot they are given.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple

from modules.costing.catalog import non_negative_number
from modules.costing.schemas import (
    CatalogItem,
    CostBreakdown,
    CostIssue,
    CostNode,
    IssueKind,
    MaterialRequirement,
    ProductId,
)
from modules.products.types import ProductType

logger = logging.getLogger(__name__)

Catalog = Mapping[ProductId, CatalogItem]
WarningCallback = Callable[[CostIssue], None]


@dataclass
class _OpenProduct:
    """A composite product whose components are still being costed."""

    item: CatalogItem
    node: CostNode
    next_edge: int = 0
    total: float = 0.0


def compute_cost(catalog: Catalog, product_id: ProductId, on_warning: Optional[WarningCallback] = None) -> float:
    """Total unit cost of ``product_id``. Never raises for missing or cyclic data."""
    return explain_cost(catalog, product_id, on_warning).unit_cost


def explain_cost(
    catalog: Catalog, product_id: ProductId, on_warning: Optional[WarningCallback] = None
) -> CostBreakdown:
    """Same walk as :func:`compute_cost`, keeping the costed tree and the issues met."""
    issues: List[CostIssue] = []

    def report(issue: CostIssue) -> None:
        logger.warning(issue.message)
        issues.append(issue)
        if on_warning is not None:
            on_warning(issue)

    root = _walk(catalog, product_id, report)
    return CostBreakdown(root=root, issues=issues)


def _enter(
    catalog: Catalog,
    product_id: ProductId,
    quantity: float,
    parent_id: Optional[ProductId],
    visiting: Set[ProductId],
    report: WarningCallback,
) -> Tuple[CostNode, Optional[_OpenProduct]]:
    """Create the node for one edge.

    Leaves (raw materials, cycles, missing ids) come back finished. A
    composite comes back open and is added to ``visiting``.
    """
    if product_id in visiting:
        report(
            CostIssue(
                kind=IssueKind.CYCLE,
                product_id=product_id,
                parent_id=parent_id,
                message=(
                    f"Circular reference: product {product_id} is its own component "
                    f"(via {parent_id}); counted as 0"
                ),
            )
        )
        return CostNode(product_id=product_id, quantity=quantity, issue=IssueKind.CYCLE), None

    item = catalog.get(product_id)
    if item is None:
        report(
            CostIssue(
                kind=IssueKind.MISSING_COMPONENT,
                product_id=product_id,
                parent_id=parent_id,
                message=(
                    f"Missing component: product {product_id} (used by {parent_id}) "
                    f"is not in the catalog; counted as 0"
                ),
            )
        )
        return CostNode(product_id=product_id, quantity=quantity, issue=IssueKind.MISSING_COMPONENT), None

    node = CostNode(product_id=item.id, name=item.name, type=item.type, unit=item.unit, quantity=quantity)
    if item.type == ProductType.RAW_MATERIAL:
        node.unit_cost = item.unit_cost
        node.extended_cost = node.unit_cost * quantity
        return node, None

    visiting.add(product_id)
    return node, _OpenProduct(item=item, node=node)


def _edge_quantity(edge, parent_id: ProductId, report: WarningCallback) -> float:
    quantity = non_negative_number(edge.quantity)
    if quantity is None:
        report(
            CostIssue(
                kind=IssueKind.INVALID_QUANTITY,
                product_id=edge.component_id,
                parent_id=parent_id,
                message=f"Invalid quantity {edge.quantity!r} for component {edge.component_id} "
                f"of product {parent_id}; counted as 0",
            )
        )
        return 0.0
    return quantity


def _walk(catalog: Catalog, product_id: ProductId, report: WarningCallback) -> CostNode:
    visiting: Set[ProductId] = set()
    root, opened = _enter(catalog, product_id, 1.0, None, visiting, report)
    stack: List[_OpenProduct] = [opened] if opened is not None else []

    while stack:
        current = stack[-1]
        components = current.item.components
        if current.next_edge < len(components):
            edge = components[current.next_edge]
            current.next_edge += 1
            quantity = _edge_quantity(edge, current.item.id, report)
            child, child_open = _enter(catalog, edge.component_id, quantity, current.item.id, visiting, report)
            current.node.children.append(child)
            if child_open is None:
                current.total += child.unit_cost * quantity
            else:
                stack.append(child_open)
            continue

        # all components costed: close the product and fold it into its parent
        stack.pop()
        visiting.discard(current.item.id)
        node = current.node
        node.unit_cost = current.total
        node.extended_cost = node.unit_cost * node.quantity
        if stack:
            stack[-1].total += node.unit_cost * node.quantity

    return root


def compute_all_costs(catalog: Catalog, on_warning: Optional[WarningCallback] = None) -> Dict[ProductId, float]:
    return {product_id: compute_cost(catalog, product_id, on_warning) for product_id in catalog}


def find_cycle(catalog: Catalog, product_id: ProductId) -> Optional[List[ProductId]]:
    """Return the first cycle reachable from ``product_id`` as a path, e.g. ``[a, b, a]``."""
    if product_id not in catalog:
        return None

    path: List[ProductId] = [product_id]
    on_path: Set[ProductId] = {product_id}
    cleared: Set[ProductId] = set()
    # (product, index of the next component to follow), parallel to ``path``
    stack: List[List] = [[catalog[product_id], 0]]

    while stack:
        frame = stack[-1]
        item, index = frame
        if index < len(item.components):
            frame[1] += 1
            next_id = item.components[index].component_id
            if next_id in on_path:
                return path[path.index(next_id):] + [next_id]
            if next_id in cleared or next_id not in catalog:
                continue
            path.append(next_id)
            on_path.add(next_id)
            stack.append([catalog[next_id], 0])
            continue

        stack.pop()
        done = path.pop()
        on_path.discard(done)
        cleared.add(done)

    return None


def explode_requirements(node: CostNode, quantity: float = 1.0) -> List[MaterialRequirement]:
    """Flatten a costed tree into raw-material quantities for ``quantity`` units of its root."""
    totals: Dict[ProductId, MaterialRequirement] = {}
    pending: List[Tuple[CostNode, float]] = [(node, quantity)]

    while pending:
        current, multiplier = pending.pop()
        if current.issue is not None:
            continue
        if current.type == ProductType.RAW_MATERIAL:
            requirement = totals.get(current.product_id)
            if requirement is None:
                requirement = MaterialRequirement(
                    product_id=current.product_id,
                    name=current.name,
                    unit=current.unit,
                    unit_cost=current.unit_cost,
                )
                totals[current.product_id] = requirement
            requirement.quantity += multiplier
            requirement.total_cost += multiplier * current.unit_cost
            continue
        # reversed so materials come out in component order
        for child in reversed(current.children):
            pending.append((child, multiplier * child.quantity))

    return list(totals.values())
