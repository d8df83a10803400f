from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.database import get_db
from modules.finance import schemas, service

router = APIRouter(prefix="/transactions", tags=["finance"])


@router.post("", response_model=schemas.TransactionRead)
def create_transaction_endpoint(transaction_in: schemas.TransactionCreate, db: Session = Depends(get_db)):
    return service.create_transaction(db, transaction_in)


@router.get("", response_model=list[schemas.TransactionRead])
def list_transactions_endpoint(db: Session = Depends(get_db)):
    return service.list_transactions(db)


@router.get("/{transaction_id}", response_model=schemas.TransactionRead)
def get_transaction_endpoint(transaction_id: int, db: Session = Depends(get_db)):
    return service.get_transaction(db, transaction_id)


@router.put("/{transaction_id}", response_model=schemas.TransactionRead)
def update_transaction_endpoint(
    transaction_id: int, transaction_in: schemas.TransactionUpdate, db: Session = Depends(get_db)
):
    return service.update_transaction(db, transaction_id, transaction_in)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction_endpoint(transaction_id: int, db: Session = Depends(get_db)):
    service.delete_transaction(db, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
