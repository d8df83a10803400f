from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.database import get_db
from modules.products import schemas, service

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=schemas.ProductRead)
def create_product_endpoint(product_in: schemas.ProductCreate, db: Session = Depends(get_db)):
    return service.create_product(db, product_in)


@router.get("", response_model=list[schemas.ProductRead])
def list_products_endpoint(db: Session = Depends(get_db)):
    return service.list_products(db)


@router.post("/import", response_model=schemas.ImportResult)
async def import_products_endpoint(request: Request, db: Session = Depends(get_db)):
    body = await request.body()
    return service.import_products_csv(db, body.decode("utf-8-sig"))


@router.get("/export")
def export_products_endpoint(db: Session = Depends(get_db)):
    return Response(
        content=service.export_products_csv(db),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=export_produtos.csv"},
    )


@router.get("/{product_id}", response_model=schemas.ProductRead)
def get_product_endpoint(product_id: int, db: Session = Depends(get_db)):
    return service.get_product(db, product_id)


@router.put("/{product_id}", response_model=schemas.ProductRead)
def update_product_endpoint(product_id: int, product_in: schemas.ProductUpdate, db: Session = Depends(get_db)):
    return service.update_product(db, product_id, product_in)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product_endpoint(product_id: int, db: Session = Depends(get_db)):
    service.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
