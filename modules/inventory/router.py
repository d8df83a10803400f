from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from modules.inventory import schemas, service

router = APIRouter(tags=["inventory"])


@router.post("/stock-movements", response_model=schemas.StockMovementRead)
def add_stock_movement_endpoint(movement_in: schemas.StockMovementCreate, db: Session = Depends(get_db)):
    return service.add_stock_movement(db, movement_in)


@router.get("/stock-movements", response_model=list[schemas.StockMovementRead])
def list_stock_movements_endpoint(product_id: Optional[int] = None, db: Session = Depends(get_db)):
    return service.list_stock_movements(db, product_id=product_id)


@router.post("/projects/{project_id}/stock-out", response_model=list[schemas.StockMovementRead])
def consume_project_stock_endpoint(project_id: int, db: Session = Depends(get_db)):
    return service.consume_project_stock(db, project_id)
