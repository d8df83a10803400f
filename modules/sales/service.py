import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from core.errors import NotFoundException
from modules.clients import models as client_models
from modules.inventory.service import record_movement
from modules.inventory.types import MovementType, ReferenceType
from modules.products import models as product_models
from modules.sales import models, schemas
from modules.sales.types import PurchaseStatus
from modules.suppliers import models as supplier_models

logger = logging.getLogger(__name__)


def _get_product(db: Session, product_id: int) -> product_models.Product:
    product = db.query(product_models.Product).filter(product_models.Product.id == product_id).first()
    if not product:
        raise NotFoundException("Produto não encontrado")
    return product


def _check_client(db: Session, client_id) -> None:
    if client_id is None:
        return
    client = db.query(client_models.Client).filter(client_models.Client.id == client_id).first()
    if not client:
        raise NotFoundException("Cliente não encontrado")


def _sale_items(db: Session, sale_in: schemas.SaleCreate) -> List[models.SaleItem]:
    return [
        models.SaleItem(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            product=_get_product(db, item.product_id),
        )
        for item in sale_in.items
    ]


def _apply_sale_fields(sale: models.Sale, sale_in: schemas.SaleCreate) -> None:
    sale.date = sale_in.date
    sale.client_id = sale_in.client_id
    sale.status = sale_in.status.value
    sale.payment_method = sale_in.payment_method.value if sale_in.payment_method else None
    sale.notes = sale_in.notes
    sale.total = sum(item.quantity * item.unit_price for item in sale_in.items)


def _get_sale_model(db: Session, sale_id: int) -> models.Sale:
    sale = db.query(models.Sale).filter(models.Sale.id == sale_id).first()
    if not sale:
        raise NotFoundException("Venda não encontrada")
    return sale


def create_sale(db: Session, sale_in: schemas.SaleCreate) -> Dict[str, Any]:
    _check_client(db, sale_in.client_id)

    sale = models.Sale(items=_sale_items(db, sale_in))
    _apply_sale_fields(sale, sale_in)
    db.add(sale)
    db.flush()

    for item in sale.items:
        record_movement(
            db,
            item.product,
            MovementType.OUT,
            item.quantity,
            unit_price=item.unit_price,
            reference_type=ReferenceType.SALE,
            movement_date=sale.date,
            notes=f"Venda #{sale.id}",
        )
    db.commit()
    db.refresh(sale)
    logger.info("Created sale %s, total %.2f", sale.id, sale.total)
    return _serialize_sale(sale)


def list_sales(db: Session) -> List[Dict[str, Any]]:
    return [_serialize_sale(s) for s in db.query(models.Sale).order_by(models.Sale.id).all()]


def get_sale(db: Session, sale_id: int) -> Dict[str, Any]:
    return _serialize_sale(_get_sale_model(db, sale_id))


def update_sale(db: Session, sale_id: int, sale_in: schemas.SaleUpdate) -> Dict[str, Any]:
    """Replace header and items. Stock was moved when the sale was created and is left as is."""
    sale = _get_sale_model(db, sale_id)
    _check_client(db, sale_in.client_id)
    sale.items = _sale_items(db, sale_in)
    _apply_sale_fields(sale, sale_in)
    db.commit()
    db.refresh(sale)
    logger.info("Updated sale %s, total %.2f", sale.id, sale.total)
    return _serialize_sale(sale)


def delete_sale(db: Session, sale_id: int) -> None:
    sale = _get_sale_model(db, sale_id)
    db.delete(sale)
    db.commit()
    logger.info("Deleted sale %s", sale_id)


def _purchase_items(db: Session, purchase_in: schemas.PurchaseCreate) -> List[models.PurchaseItem]:
    return [
        models.PurchaseItem(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
            product=_get_product(db, item.product_id),
        )
        for item in purchase_in.items
    ]


def _apply_purchase_fields(db: Session, purchase: models.Purchase, purchase_in: schemas.PurchaseCreate) -> None:
    supplier_name = purchase_in.supplier_name
    if purchase_in.supplier_id is not None:
        supplier = (
            db.query(supplier_models.Supplier).filter(supplier_models.Supplier.id == purchase_in.supplier_id).first()
        )
        if not supplier:
            raise NotFoundException("Fornecedor não encontrado")
        supplier_name = supplier_name or supplier.name

    purchase.date = purchase_in.date
    purchase.supplier_id = purchase_in.supplier_id
    purchase.supplier_name = supplier_name
    purchase.status = purchase_in.status.value
    purchase.invoice_number = purchase_in.invoice_number
    purchase.notes = purchase_in.notes
    purchase.total = sum(item.quantity * item.unit_cost for item in purchase_in.items)


def _receive_purchase(db: Session, purchase: models.Purchase) -> None:
    for item in purchase.items:
        record_movement(
            db,
            item.product,
            MovementType.IN,
            item.quantity,
            unit_price=item.unit_cost,
            reference_type=ReferenceType.PURCHASE,
            movement_date=purchase.date,
            notes=f"Compra #{purchase.id}",
        )


def _get_purchase_model(db: Session, purchase_id: int) -> models.Purchase:
    purchase = db.query(models.Purchase).filter(models.Purchase.id == purchase_id).first()
    if not purchase:
        raise NotFoundException("Compra não encontrada")
    return purchase


def create_purchase(db: Session, purchase_in: schemas.PurchaseCreate) -> Dict[str, Any]:
    purchase = models.Purchase(items=_purchase_items(db, purchase_in))
    _apply_purchase_fields(db, purchase, purchase_in)
    db.add(purchase)
    db.flush()

    if purchase.status == PurchaseStatus.RECEIVED.value:
        _receive_purchase(db, purchase)
    db.commit()
    db.refresh(purchase)
    logger.info("Created purchase %s from %s, total %.2f", purchase.id, purchase.supplier_name, purchase.total)
    return _serialize_purchase(purchase)


def list_purchases(db: Session) -> List[Dict[str, Any]]:
    return [_serialize_purchase(p) for p in db.query(models.Purchase).order_by(models.Purchase.id).all()]


def get_purchase(db: Session, purchase_id: int) -> Dict[str, Any]:
    return _serialize_purchase(_get_purchase_model(db, purchase_id))


def update_purchase(db: Session, purchase_id: int, purchase_in: schemas.PurchaseUpdate) -> Dict[str, Any]:
    """Replace header and items; goods enter stock the first time the purchase is marked received."""
    purchase = _get_purchase_model(db, purchase_id)
    was_received = purchase.status == PurchaseStatus.RECEIVED.value

    purchase.items = _purchase_items(db, purchase_in)
    _apply_purchase_fields(db, purchase, purchase_in)
    db.flush()

    if not was_received and purchase.status == PurchaseStatus.RECEIVED.value:
        _receive_purchase(db, purchase)
    db.commit()
    db.refresh(purchase)
    logger.info("Updated purchase %s (%s)", purchase.id, purchase.status)
    return _serialize_purchase(purchase)


def delete_purchase(db: Session, purchase_id: int) -> None:
    purchase = _get_purchase_model(db, purchase_id)
    db.delete(purchase)
    db.commit()
    logger.info("Deleted purchase %s", purchase_id)


def _serialize_sale(sale: models.Sale) -> Dict[str, Any]:
    return {
        "id": sale.id,
        "date": sale.date,
        "client_id": sale.client_id,
        "client_name": sale.client.name if sale.client is not None else None,
        "status": sale.status,
        "payment_method": sale.payment_method,
        "notes": sale.notes,
        "total": sale.total,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total": item.quantity * item.unit_price,
            }
            for item in sale.items
        ],
    }


def _serialize_purchase(purchase: models.Purchase) -> Dict[str, Any]:
    return {
        "id": purchase.id,
        "date": purchase.date,
        "supplier_id": purchase.supplier_id,
        "supplier_name": purchase.supplier_name,
        "status": purchase.status,
        "invoice_number": purchase.invoice_number,
        "notes": purchase.notes,
        "total": purchase.total,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name,
                "quantity": item.quantity,
                "unit_cost": item.unit_cost,
                "total": item.quantity * item.unit_cost,
            }
            for item in purchase.items
        ],
    }
