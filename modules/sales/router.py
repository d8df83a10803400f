from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.database import get_db
from modules.sales import schemas, service

router = APIRouter(tags=["sales"])


@router.post("/sales", response_model=schemas.SaleRead)
def create_sale_endpoint(sale_in: schemas.SaleCreate, db: Session = Depends(get_db)):
    return service.create_sale(db, sale_in)


@router.get("/sales", response_model=list[schemas.SaleRead])
def list_sales_endpoint(db: Session = Depends(get_db)):
    return service.list_sales(db)


@router.get("/sales/{sale_id}", response_model=schemas.SaleRead)
def get_sale_endpoint(sale_id: int, db: Session = Depends(get_db)):
    return service.get_sale(db, sale_id)


@router.put("/sales/{sale_id}", response_model=schemas.SaleRead)
def update_sale_endpoint(sale_id: int, sale_in: schemas.SaleUpdate, db: Session = Depends(get_db)):
    return service.update_sale(db, sale_id, sale_in)


@router.delete("/sales/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale_endpoint(sale_id: int, db: Session = Depends(get_db)):
    service.delete_sale(db, sale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/purchases", response_model=schemas.PurchaseRead)
def create_purchase_endpoint(purchase_in: schemas.PurchaseCreate, db: Session = Depends(get_db)):
    return service.create_purchase(db, purchase_in)


@router.get("/purchases", response_model=list[schemas.PurchaseRead])
def list_purchases_endpoint(db: Session = Depends(get_db)):
    return service.list_purchases(db)


@router.get("/purchases/{purchase_id}", response_model=schemas.PurchaseRead)
def get_purchase_endpoint(purchase_id: int, db: Session = Depends(get_db)):
    return service.get_purchase(db, purchase_id)


@router.put("/purchases/{purchase_id}", response_model=schemas.PurchaseRead)
def update_purchase_endpoint(purchase_id: int, purchase_in: schemas.PurchaseUpdate, db: Session = Depends(get_db)):
    return service.update_purchase(db, purchase_id, purchase_in)


@router.delete("/purchases/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase_endpoint(purchase_id: int, db: Session = Depends(get_db)):
    service.delete_purchase(db, purchase_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
