"""Stock movements.

Every change to ``Product.current_stock`` outside the product form goes
through :func:`record_movement`, which keeps a movement row per change.
Stock never goes below zero: an outgoing movement larger than the stock on
hand empties it and the shortfall is logged.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from core.errors import NotFoundException, ValidationAppException
from modules.inventory import models, schemas
from modules.inventory.types import MovementType, ReferenceType
from modules.products import models as product_models
from modules.projects import models as project_models

logger = logging.getLogger(__name__)


def next_stock_level(current: Optional[float], movement_type: MovementType, quantity: float) -> float:
    delta = quantity if movement_type == MovementType.IN else -quantity
    return max(0.0, (current or 0.0) + delta)


def record_movement(
    db: Session,
    product: product_models.Product,
    movement_type: MovementType,
    quantity: float,
    *,
    unit_price: Optional[float] = None,
    reference_type: ReferenceType = ReferenceType.MANUAL,
    movement_date: Optional[date] = None,
    notes: Optional[str] = None,
    project_id: Optional[int] = None,
) -> models.StockMovement:
    """Apply one movement to ``product`` and stage its history row. The caller commits."""
    previous = product.current_stock or 0.0
    product.current_stock = next_stock_level(previous, movement_type, quantity)
    if movement_type == MovementType.OUT and quantity > previous:
        logger.warning(
            "Stock of product %s (%s) short by %.2f; floored at 0", product.id, product.name, quantity - previous
        )

    movement = models.StockMovement(
        product_id=product.id,
        product=product,
        movement_type=movement_type.value,
        quantity=quantity,
        unit_price=unit_price,
        total_value=quantity * unit_price if unit_price is not None else None,
        project_id=project_id,
        reference_type=reference_type.value,
        date=movement_date or date.today(),
        notes=notes,
        resulting_stock=product.current_stock,
    )
    db.add(movement)
    return movement


def add_stock_movement(db: Session, movement_in: schemas.StockMovementCreate) -> Dict[str, Any]:
    product = (
        db.query(product_models.Product).filter(product_models.Product.id == movement_in.product_id).first()
    )
    if not product:
        raise NotFoundException("Produto não encontrado")

    movement = record_movement(
        db,
        product,
        movement_in.movement_type,
        movement_in.quantity,
        unit_price=movement_in.unit_price,
        reference_type=movement_in.reference_type,
        movement_date=movement_in.date,
        notes=movement_in.notes,
    )
    db.commit()
    db.refresh(movement)
    logger.info(
        "Stock %s of %.2f for product %s, now %.2f",
        movement.movement_type,
        movement.quantity,
        product.id,
        product.current_stock,
    )
    return _serialize_movement(movement)


def list_stock_movements(db: Session, product_id: Optional[int] = None) -> List[Dict[str, Any]]:
    query = db.query(models.StockMovement)
    if product_id is not None:
        query = query.filter(models.StockMovement.product_id == product_id)
    movements = query.order_by(models.StockMovement.date.desc(), models.StockMovement.id.desc()).all()
    return [_serialize_movement(m) for m in movements]


def consume_project_stock(db: Session, project_id: int) -> List[Dict[str, Any]]:
    """Take every line of a project out of stock, once."""
    project = db.query(project_models.Project).filter(project_models.Project.id == project_id).first()
    if not project:
        raise NotFoundException("Projeto não encontrado")

    already_done = (
        db.query(models.StockMovement)
        .filter(
            models.StockMovement.project_id == project_id,
            models.StockMovement.reference_type == ReferenceType.PROJECT.value,
        )
        .first()
    )
    if already_done:
        raise ValidationAppException("A baixa de estoque deste projeto já foi feita")

    movements = [
        record_movement(
            db,
            line.product,
            MovementType.OUT,
            line.quantity,
            unit_price=line.unit_price,
            reference_type=ReferenceType.PROJECT,
            notes=f"Saída para projeto #{project.id}",
            project_id=project.id,
        )
        for line in project.lines
    ]
    db.commit()
    logger.info("Project %s: %d stock movements recorded", project.id, len(movements))
    return [_serialize_movement(m) for m in movements]


def _serialize_movement(movement: models.StockMovement) -> Dict[str, Any]:
    return {
        "id": movement.id,
        "product_id": movement.product_id,
        "product_name": movement.product.name,
        "movement_type": movement.movement_type,
        "quantity": movement.quantity,
        "unit_price": movement.unit_price,
        "total_value": movement.total_value,
        "project_id": movement.project_id,
        "project_title": movement.project.title if movement.project is not None else None,
        "reference_type": movement.reference_type,
        "date": movement.date,
        "notes": movement.notes,
        "resulting_stock": movement.resulting_stock,
    }
