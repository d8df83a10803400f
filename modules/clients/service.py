import logging
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from core.csv_io import pick_columns, read_csv_text, to_csv_text
from core.errors import NotFoundException
from modules.clients import models, schemas

logger = logging.getLogger(__name__)

CLIENT_CSV_ALIASES = {
    "name": ("nome", "name", "razao_social", "razão social", "cliente"),
    "email": ("email", "e-mail"),
    "phone": ("telefone", "phone", "fone"),
    "mobile": ("celular", "mobile", "whatsapp"),
    "cpf": ("cpf",),
    "cnpj": ("cnpj",),
    "street": ("endereco", "endereço", "street", "rua", "logradouro"),
    "number": ("numero", "número", "num"),
    "neighborhood": ("bairro", "neighborhood"),
    "city": ("cidade", "city"),
    "state": ("estado", "state", "uf"),
    "zip_code": ("cep", "zip_code", "codigo_postal"),
}

CLIENT_CSV_COLUMNS = (
    "nome",
    "email",
    "telefone",
    "celular",
    "cpf",
    "cnpj",
    "endereco",
    "numero",
    "bairro",
    "cidade",
    "estado",
    "cep",
)


def create_client(db: Session, client_in: schemas.ClientCreate) -> models.Client:
    client = models.Client(**client_in.model_dump())
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info("Created client %s (%s)", client.id, client.name)
    return client


def list_clients(db: Session) -> List[models.Client]:
    return db.query(models.Client).order_by(models.Client.name).all()


def get_client(db: Session, client_id: int) -> models.Client:
    client = db.query(models.Client).filter(models.Client.id == client_id).first()
    if not client:
        raise NotFoundException("Cliente não encontrado")
    return client


def update_client(db: Session, client_id: int, client_in: schemas.ClientUpdate) -> models.Client:
    client = get_client(db, client_id)
    for field, value in client_in.model_dump().items():
        setattr(client, field, value)
    db.commit()
    db.refresh(client)
    logger.info("Updated client %s", client.id)
    return client


def delete_client(db: Session, client_id: int) -> None:
    # Projects and sales of the client stay, without a client
    client = get_client(db, client_id)
    db.delete(client)
    db.commit()
    logger.info("Deleted client %s", client_id)


def import_clients_csv(db: Session, text: str) -> Dict[str, Any]:
    frame = pick_columns(read_csv_text(text), CLIENT_CSV_ALIASES)

    imported = 0
    skipped: List[int] = []
    for idx, row in enumerate(frame.to_dict("records")):
        line_number = idx + 2  # header is line 1
        if not row["name"]:
            logger.warning("CSV line %d: client without a name, skipped", line_number)
            skipped.append(line_number)
            continue
        try:
            client_in = schemas.ClientCreate(
                name=row["name"],
                email=row["email"] or None,
                phone=row["phone"] or None,
                mobile=row["mobile"] or None,
                document=row["cnpj"] or row["cpf"] or None,
                street=row["street"] or None,
                number=row["number"] or None,
                neighborhood=row["neighborhood"] or None,
                city=row["city"] or None,
                state=row["state"] or None,
                zip_code=row["zip_code"] or None,
            )
        except ValidationError as exc:
            logger.warning("CSV line %d: invalid client skipped (%d errors)", line_number, exc.error_count())
            skipped.append(line_number)
            continue
        db.add(models.Client(**client_in.model_dump()))
        imported += 1

    db.commit()
    logger.info("Imported %d clients from CSV (%d lines skipped)", imported, len(skipped))
    return {"imported": imported, "skipped_lines": skipped}


def export_clients_csv(db: Session) -> str:
    rows = []
    for client in list_clients(db):
        document = client.document or ""
        rows.append(
            {
                "nome": client.name,
                "email": client.email or "",
                "telefone": client.phone or "",
                "celular": client.mobile or "",
                "cpf": document if len(document) == 11 else "",
                "cnpj": document if len(document) == 14 else "",
                "endereco": client.street or "",
                "numero": client.number or "",
                "bairro": client.neighborhood or "",
                "cidade": client.city or "",
                "estado": client.state or "",
                "cep": client.zip_code or "",
            }
        )
    return to_csv_text(rows, CLIENT_CSV_COLUMNS)
