import pathlib
import sys
from datetime import date, datetime
from types import SimpleNamespace as NS

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from core.settings import Settings, format_currency
from modules.dashboard.service import compute_dashboard_stats

TODAY = date(2024, 3, 15)


def build_data():
    projects = [
        NS(id=1, title="Cozinha", status="approved", budget=1000.0, created_at=datetime(2024, 3, 1, 9)),
        NS(id=2, title="Closet", status="in_production", budget=2000.0, created_at=datetime(2024, 3, 2, 9)),
        NS(id=3, title="Mesa", status="delivered", budget=800.0, created_at=datetime(2024, 3, 3, 9)),
        NS(id=4, title="Estante", status="quote", budget=500.0, created_at=datetime(2024, 3, 4, 9)),
    ]
    sales = [
        NS(id=1, date=date(2024, 3, 10), status="completed", total=300.0, client=NS(name="Ana"),
           created_at=datetime(2024, 3, 10, 10)),
        NS(id=2, date=date(2024, 2, 28), status="completed", total=999.0, client=None,
           created_at=datetime(2024, 2, 28, 10)),
        NS(id=3, date=date(2024, 3, 31), status="pending", total=150.0, client=None,
           created_at=datetime(2024, 3, 12, 10)),
    ]
    purchases = [
        NS(id=1, supplier_name="Madeireira Sul", total=420.0, created_at=datetime(2024, 3, 11, 8)),
    ]
    transactions = [
        NS(type="income", amount=200.0, date=date(2024, 3, 1)),
        NS(type="income", amount=50.0, date=date(2024, 4, 1)),
        NS(type="expense", amount=75.0, date=date(2024, 3, 5)),
    ]
    products = [
        NS(id=1, current_stock=2, min_stock=5),
        NS(id=2, current_stock=10, min_stock=10),
        NS(id=3, current_stock=30, min_stock=5),
    ]
    return projects, sales, purchases, transactions, products


def compute(settings=None, **overrides):
    projects, sales, purchases, transactions, products = build_data()
    kwargs = dict(
        clients=[NS(), NS()],
        projects=projects,
        sales=sales,
        purchases=purchases,
        transactions=transactions,
        products=products,
        product_costs={1: 10.0, 2: 2.5, 3: 1.0},
        settings=settings or Settings(),
        today=TODAY,
    )
    kwargs.update(overrides)
    return compute_dashboard_stats(**kwargs)


def test_counts():
    stats = compute()
    assert stats["total_clients"] == 2
    assert stats["active_projects"] == 2
    assert stats["low_stock_items"] == 2


def test_monthly_revenue_uses_current_month_only():
    stats = compute()
    # completed sale in March + March income; February sale, April income and expenses excluded
    assert stats["monthly_revenue"] == pytest.approx(500.0)


def test_pending_payments_include_share_of_billable_projects():
    assert compute()["pending_payments"] == pytest.approx(150.0 + 800.0 * 0.5)
    assert compute(Settings(pending_project_share=1.0))["pending_payments"] == pytest.approx(950.0)


def test_inventory_value_uses_rolled_up_costs():
    assert compute()["inventory_value"] == pytest.approx(2 * 10.0 + 10 * 2.5 + 30 * 1.0)


def test_recent_activity_is_newest_first_and_capped():
    activity = compute()["recent_activity"]

    assert len(activity) == 5
    dates = [a["date"] for a in activity]
    assert dates == sorted(dates, reverse=True)
    assert activity[0]["type"] == "sale"
    assert activity[0]["message"] == f"Venda para Cliente: {format_currency(150.0)}"
    assert activity[1]["type"] == "purchase"
    assert "Madeireira Sul" in activity[1]["message"]


def test_recent_activity_limit_from_settings():
    assert len(compute(Settings(recent_activity_limit=2))["recent_activity"]) == 2


def test_empty_collections():
    stats = compute_dashboard_stats(
        clients=[], projects=[], sales=[], purchases=[], transactions=[], products=[],
        product_costs={}, settings=Settings(), today=TODAY,
    )
    assert stats["monthly_revenue"] == 0
    assert stats["recent_activity"] == []


def test_format_currency_uses_brazilian_separators():
    assert format_currency(1234.5) == "R$ 1.234,50"
