from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.database import get_db
from modules.suppliers import schemas, service

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


@router.post("", response_model=schemas.SupplierRead)
def create_supplier_endpoint(supplier_in: schemas.SupplierCreate, db: Session = Depends(get_db)):
    return service.create_supplier(db, supplier_in)


@router.get("", response_model=list[schemas.SupplierRead])
def list_suppliers_endpoint(active_only: bool = False, db: Session = Depends(get_db)):
    return service.list_suppliers(db, active_only=active_only)


@router.get("/{supplier_id}", response_model=schemas.SupplierRead)
def get_supplier_endpoint(supplier_id: int, db: Session = Depends(get_db)):
    return service.get_supplier(db, supplier_id)


@router.put("/{supplier_id}", response_model=schemas.SupplierRead)
def update_supplier_endpoint(supplier_id: int, supplier_in: schemas.SupplierUpdate, db: Session = Depends(get_db)):
    return service.update_supplier(db, supplier_id, supplier_in)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier_endpoint(supplier_id: int, db: Session = Depends(get_db)):
    service.delete_supplier(db, supplier_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
