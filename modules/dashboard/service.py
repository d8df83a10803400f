"""Dashboard figures derived from already-loaded collections.

Everything here is a plain reduction over the objects passed in; callers
load them (see router) and pass ``today`` explicitly in tests.
"""

import calendar
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.settings import Settings, format_currency
from modules.finance.schemas import TransactionType
from modules.projects.types import ACTIVE_STATUSES, BILLABLE_STATUSES
from modules.sales.types import SaleStatus

ACTIVITY_PER_KIND = 3


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def _month_bounds(today: date):
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def _in_month(value: Any, first: date, last: date) -> bool:
    day = _as_date(value)
    return day is not None and first <= day <= last


def _recent_activity(projects, sales, purchases, currency: str, limit: int) -> List[Dict[str, Any]]:
    activity = []
    for p in list(projects)[-ACTIVITY_PER_KIND:]:
        activity.append(
            {"type": "project", "message": f"Novo projeto #{p.id}: {p.title}", "date": p.created_at}
        )
    for s in list(sales)[-ACTIVITY_PER_KIND:]:
        client_name = s.client.name if getattr(s, "client", None) is not None else "Cliente"
        activity.append(
            {
                "type": "sale",
                "message": f"Venda para {client_name}: {format_currency(s.total, currency)}",
                "date": s.created_at,
            }
        )
    for p in list(purchases)[-ACTIVITY_PER_KIND:]:
        activity.append(
            {
                "type": "purchase",
                "message": f"Compra de {p.supplier_name or 'Fornecedor'}: {format_currency(p.total, currency)}",
                "date": p.created_at,
            }
        )
    activity.sort(key=lambda a: a["date"] or datetime.min, reverse=True)
    return activity[:limit]


def compute_dashboard_stats(
    *,
    clients: Sequence[Any],
    projects: Sequence[Any],
    sales: Sequence[Any],
    purchases: Sequence[Any],
    transactions: Sequence[Any],
    products: Sequence[Any],
    product_costs: Mapping[Any, float],
    settings: Settings,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    today = today or date.today()
    first, last = _month_bounds(today)

    active_values = {s.value for s in ACTIVE_STATUSES}
    billable_values = {s.value for s in BILLABLE_STATUSES}

    monthly_sales = sum(
        s.total for s in sales if s.status == SaleStatus.COMPLETED.value and _in_month(s.date, first, last)
    )
    monthly_income = sum(
        t.amount for t in transactions if t.type == TransactionType.INCOME.value and _in_month(t.date, first, last)
    )

    pending_sales = sum(s.total for s in sales if s.status == SaleStatus.PENDING.value)
    pending_projects = sum(
        (p.budget or 0.0) * settings.pending_project_share for p in projects if p.status in billable_values
    )

    inventory_value = sum(
        max(p.current_stock or 0, 0) * product_costs.get(p.id, 0.0) for p in products
    )

    return {
        "total_clients": len(clients),
        "active_projects": sum(1 for p in projects if p.status in active_values),
        "monthly_revenue": monthly_sales + monthly_income,
        "pending_payments": pending_sales + pending_projects,
        "low_stock_items": sum(1 for p in products if (p.current_stock or 0) <= (p.min_stock or 0)),
        "inventory_value": inventory_value,
        "recent_activity": _recent_activity(
            projects, sales, purchases, settings.currency_symbol, settings.recent_activity_limit
        ),
    }
