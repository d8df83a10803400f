from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.settings import get_settings
from modules.clients.models import Client
from modules.costing.rollup import compute_all_costs
from modules.dashboard.service import compute_dashboard_stats
from modules.finance.models import Transaction
from modules.products import service as product_service
from modules.products.models import Product
from modules.projects.models import Project
from modules.sales.models import Purchase, Sale

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard_endpoint(db: Session = Depends(get_db)):
    products = db.query(Product).order_by(Product.id).all()
    catalog = product_service.catalog_from_products(products)
    return compute_dashboard_stats(
        clients=db.query(Client).all(),
        projects=db.query(Project).order_by(Project.id).all(),
        sales=db.query(Sale).order_by(Sale.id).all(),
        purchases=db.query(Purchase).order_by(Purchase.id).all(),
        transactions=db.query(Transaction).all(),
        products=products,
        product_costs=compute_all_costs(catalog),
        settings=get_settings(),
    )
