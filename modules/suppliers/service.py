import logging
from typing import List

from sqlalchemy.orm import Session

from core.errors import NotFoundException
from modules.suppliers import models, schemas

logger = logging.getLogger(__name__)


def create_supplier(db: Session, supplier_in: schemas.SupplierCreate) -> models.Supplier:
    supplier = models.Supplier(**supplier_in.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    logger.info("Created supplier %s (%s)", supplier.id, supplier.name)
    return supplier


def list_suppliers(db: Session, active_only: bool = False) -> List[models.Supplier]:
    query = db.query(models.Supplier)
    if active_only:
        query = query.filter(models.Supplier.active.is_(True))
    return query.order_by(models.Supplier.name).all()


def get_supplier(db: Session, supplier_id: int) -> models.Supplier:
    supplier = db.query(models.Supplier).filter(models.Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundException("Fornecedor não encontrado")
    return supplier


def update_supplier(db: Session, supplier_id: int, supplier_in: schemas.SupplierUpdate) -> models.Supplier:
    supplier = get_supplier(db, supplier_id)
    for field, value in supplier_in.model_dump().items():
        setattr(supplier, field, value)
    db.commit()
    db.refresh(supplier)
    logger.info("Updated supplier %s", supplier.id)
    return supplier


def delete_supplier(db: Session, supplier_id: int) -> None:
    # Purchases keep their supplier_name; the database clears supplier_id
    supplier = get_supplier(db, supplier_id)
    db.delete(supplier)
    db.commit()
    logger.info("Deleted supplier %s", supplier_id)
