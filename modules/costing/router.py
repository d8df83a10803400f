from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from core.database import get_db
from core.settings import get_settings
from modules.costing.rollup import compute_all_costs
from modules.costing.service import CostingService
from modules.products import service as product_service
from modules.projects import service as project_service
from modules.reports.excel import build_project_cost_excel

router = APIRouter(prefix="/costing", tags=["costing"])


@router.get("/products")
def list_product_costs(db: Session = Depends(get_db)):
    catalog = product_service.load_catalog(db)
    costs = compute_all_costs(catalog)
    return [
        {"product_id": product_id, "name": catalog[product_id].name, "unit_cost": cost}
        for product_id, cost in costs.items()
    ]


@router.get("/products/{product_id}")
def product_cost_breakdown(product_id: int, db: Session = Depends(get_db)):
    product_service._get_product_model(db, product_id)
    costing_service = CostingService(settings=get_settings())
    return costing_service.product_breakdown(product_service.load_catalog(db), product_id)


@router.get("/projects/{project_id}")
def project_costs(project_id: int, db: Session = Depends(get_db)):
    project = project_service._get_project_model(db, project_id)
    costing_service = CostingService(settings=get_settings())
    return costing_service.compute_project(project, product_service.load_catalog(db))


@router.get("/projects/{project_id}/excel")
def download_project_costs_excel(project_id: int, db: Session = Depends(get_db)):
    project = project_service._get_project_model(db, project_id)
    settings = get_settings()
    cost_data = CostingService(settings=settings).compute_project(project, product_service.load_catalog(db))
    stream = build_project_cost_excel(cost_data, currency_symbol=settings.currency_symbol)
    filename = f"custos_projeto_{project_id}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
