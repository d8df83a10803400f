from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.database import get_db
from modules.clients import schemas, service

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=schemas.ClientRead)
def create_client_endpoint(client_in: schemas.ClientCreate, db: Session = Depends(get_db)):
    return service.create_client(db, client_in)


@router.get("", response_model=list[schemas.ClientRead])
def list_clients_endpoint(db: Session = Depends(get_db)):
    return service.list_clients(db)


@router.post("/import", response_model=schemas.ClientImportResult)
async def import_clients_endpoint(request: Request, db: Session = Depends(get_db)):
    body = await request.body()
    return service.import_clients_csv(db, body.decode("utf-8-sig"))


@router.get("/export")
def export_clients_endpoint(db: Session = Depends(get_db)):
    return Response(
        content=service.export_clients_csv(db),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=export_clientes.csv"},
    )


@router.get("/{client_id}", response_model=schemas.ClientRead)
def get_client_endpoint(client_id: int, db: Session = Depends(get_db)):
    return service.get_client(db, client_id)


@router.put("/{client_id}", response_model=schemas.ClientRead)
def update_client_endpoint(client_id: int, client_in: schemas.ClientUpdate, db: Session = Depends(get_db)):
    return service.update_client(db, client_id, client_in)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client_endpoint(client_id: int, db: Session = Depends(get_db)):
    service.delete_client(db, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
