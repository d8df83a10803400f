from datetime import datetime
from typing import Any, Dict, List, Mapping

from core.errors import ValidationAppException
from core.settings import Settings, sale_price_from_margin
from modules.costing.rollup import explain_cost, explode_requirements
from modules.costing.schemas import CatalogItem, CostIssue, MaterialRequirement, ProductId
from modules.projects.models import Project


def _dedupe_issues(issues: List[CostIssue]) -> List[CostIssue]:
    seen = set()
    unique = []
    for issue in issues:
        key = (issue.kind, issue.product_id, issue.parent_id)
        if key in seen:
            continue
        seen.add(key)
        unique.append(issue)
    return unique


def _with_cost_shares(requirements: List[MaterialRequirement]) -> List[MaterialRequirement]:
    total = sum(r.total_cost for r in requirements)
    for r in requirements:
        r.cost_share_pct = (r.total_cost / total * 100) if total > 0 else 0.0
    # Highest impact first
    return sorted(requirements, key=lambda r: r.total_cost, reverse=True)


class CostingService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def product_breakdown(self, catalog: Mapping[ProductId, CatalogItem], product_id: ProductId) -> Dict[str, Any]:
        breakdown = explain_cost(catalog, product_id)
        requirements = _with_cost_shares(explode_requirements(breakdown.root))
        return {
            "product_id": product_id,
            "name": breakdown.root.name,
            "unit_cost": breakdown.unit_cost,
            "suggested_sale_price": sale_price_from_margin(breakdown.unit_cost, self.settings.default_profit_margin),
            "cost_complete": not breakdown.issues,
            "tree": breakdown.root.model_dump(mode="json"),
            "requirements": [r.model_dump(mode="json") for r in requirements],
            "issues": [i.model_dump(mode="json") for i in breakdown.issues],
        }

    def compute_project(self, project: Project, catalog: Mapping[ProductId, CatalogItem]) -> Dict[str, Any]:
        lines = project.lines or []
        if not lines:
            raise ValidationAppException("Projeto sem produtos")

        per_line_results: List[Dict[str, Any]] = []
        all_issues: List[CostIssue] = []
        merged: Dict[ProductId, MaterialRequirement] = {}
        materials_cost = 0.0
        lines_total = 0.0
        total_quantity = 0.0

        for line_number, line in enumerate(lines, start=1):
            breakdown = explain_cost(catalog, line.product_id)
            all_issues.extend(breakdown.issues)

            qty = line.quantity
            line_cost = breakdown.unit_cost * qty
            line_revenue = line.unit_price * qty
            total_quantity += qty
            materials_cost += line_cost
            lines_total += line_revenue

            for req in explode_requirements(breakdown.root, qty):
                entry = merged.get(req.product_id)
                if entry is None:
                    merged[req.product_id] = req
                else:
                    entry.quantity += req.quantity
                    entry.total_cost += req.total_cost

            per_line_results.append(
                {
                    "line_number": line_number,
                    "line_id": line.id,
                    "product_id": line.product_id,
                    "product_name": breakdown.root.name or (line.product.name if line.product else None),
                    "quantity": qty,
                    "unit_cost": breakdown.unit_cost,
                    "materials_cost": line_cost,
                    "unit_price": line.unit_price,
                    "revenue": line_revenue,
                    "cost_complete": not breakdown.issues,
                }
            )

        requirements = _with_cost_shares(list(merged.values()))
        issues = _dedupe_issues(all_issues)

        labor_cost = project.labor_cost or 0.0
        total_cost = materials_cost + labor_cost
        revenue = project.budget if project.budget else lines_total
        gross_margin = revenue - total_cost
        margin_pct = (gross_margin / revenue * 100) if revenue > 0 else 0.0
        target_margin = (
            project.profit_margin if project.profit_margin is not None else self.settings.default_profit_margin
        )

        return {
            "header": {
                "project_id": project.id,
                "project_title": project.title,
                "client_name": project.client.name if project.client is not None else None,
                "status": project.status,
                "generated_at": datetime.now().isoformat(),
                "line_count": len(lines),
                "total_quantity": total_quantity,
            },
            "summary": {
                "materials_cost": materials_cost,
                "labor_cost": labor_cost,
                "total_cost": total_cost,
                "lines_total": lines_total,
                "revenue": revenue,
                "gross_margin": gross_margin,
                "margin_pct": margin_pct,
                "target_margin_pct": target_margin,
                "suggested_price": sale_price_from_margin(total_cost, target_margin),
                "issue_count": len(issues),
                "cost_complete": not issues,
            },
            "lines": per_line_results,
            "requirements": [r.model_dump(mode="json") for r in requirements],
            "issues": [i.model_dump(mode="json") for i in issues],
        }
