import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core.errors import NotFoundException
from modules.finance import models, schemas
from modules.projects import models as project_models

logger = logging.getLogger(__name__)


def _check_project(db: Session, project_id: Optional[int]) -> None:
    if project_id is None:
        return
    project = db.query(project_models.Project).filter(project_models.Project.id == project_id).first()
    if not project:
        raise NotFoundException("Projeto não encontrado")


def _apply_fields(transaction: models.Transaction, transaction_in: schemas.TransactionCreate) -> None:
    transaction.type = transaction_in.type.value
    transaction.category = transaction_in.category
    transaction.description = transaction_in.description
    transaction.amount = transaction_in.amount
    transaction.date = transaction_in.date
    transaction.project_id = transaction_in.project_id


def create_transaction(db: Session, transaction_in: schemas.TransactionCreate) -> models.Transaction:
    _check_project(db, transaction_in.project_id)

    transaction = models.Transaction()
    _apply_fields(transaction, transaction_in)
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    logger.info("Recorded %s of %.2f (%s)", transaction.type, transaction.amount, transaction.category)
    return transaction


def list_transactions(db: Session) -> List[models.Transaction]:
    return db.query(models.Transaction).order_by(models.Transaction.date.desc(), models.Transaction.id.desc()).all()


def get_transaction(db: Session, transaction_id: int) -> models.Transaction:
    transaction = db.query(models.Transaction).filter(models.Transaction.id == transaction_id).first()
    if not transaction:
        raise NotFoundException("Transação não encontrada")
    return transaction


def update_transaction(
    db: Session, transaction_id: int, transaction_in: schemas.TransactionUpdate
) -> models.Transaction:
    transaction = get_transaction(db, transaction_id)
    _check_project(db, transaction_in.project_id)
    _apply_fields(transaction, transaction_in)
    db.commit()
    db.refresh(transaction)
    logger.info("Updated transaction %s", transaction.id)
    return transaction


def delete_transaction(db: Session, transaction_id: int) -> None:
    transaction = get_transaction(db, transaction_id)
    db.delete(transaction)
    db.commit()
    logger.info("Deleted transaction %s", transaction_id)
