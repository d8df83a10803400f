import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from core.errors import NotFoundException, ValidationAppException
from modules.clients import models as client_models
from modules.products import models as product_models
from modules.projects import models, schemas

logger = logging.getLogger(__name__)


def _build_lines(db: Session, project_in: schemas.ProjectCreate) -> List[models.ProjectLine]:
    if not project_in.lines:
        raise ValidationAppException("Adicione pelo menos um produto ao projeto")

    if project_in.client_id is not None:
        client = db.query(client_models.Client).filter(client_models.Client.id == project_in.client_id).first()
        if not client:
            raise NotFoundException("Cliente não encontrado")

    model_lines = []
    for line in project_in.lines:
        product = db.query(product_models.Product).filter(product_models.Product.id == line.product_id).first()
        if not product:
            raise NotFoundException("Produto não encontrado")
        model_lines.append(
            models.ProjectLine(
                product_id=line.product_id, quantity=line.quantity, unit_price=line.unit_price, product=product
            )
        )
    return model_lines


def _apply_fields(project: models.Project, project_in: schemas.ProjectCreate) -> None:
    budget = project_in.budget
    if budget is None:
        budget = sum(line.quantity * line.unit_price for line in project_in.lines)

    project.title = project_in.title
    project.client_id = project_in.client_id
    project.description = project_in.description
    project.status = project_in.status.value
    project.budget = budget
    project.start_date = project_in.start_date
    project.end_date = project_in.end_date
    project.labor_cost = project_in.labor_cost
    project.profit_margin = project_in.profit_margin


def create_project(db: Session, project_in: schemas.ProjectCreate) -> Dict[str, Any]:
    project = models.Project(lines=_build_lines(db, project_in))
    _apply_fields(project, project_in)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Created project %s (%s) with %d lines", project.id, project.title, len(project.lines))
    return _serialize_project(project)


def list_projects(db: Session) -> List[Dict[str, Any]]:
    projects = db.query(models.Project).order_by(models.Project.id).all()
    return [_serialize_project(p) for p in projects]


def get_project(db: Session, project_id: int) -> Dict[str, Any]:
    return _serialize_project(_get_project_model(db, project_id))


def update_project(db: Session, project_id: int, project_in: schemas.ProjectUpdate) -> Dict[str, Any]:
    project = _get_project_model(db, project_id)
    project.lines = _build_lines(db, project_in)
    _apply_fields(project, project_in)
    db.commit()
    db.refresh(project)
    logger.info("Updated project %s (%d lines)", project.id, len(project.lines))
    return _serialize_project(project)


def delete_project(db: Session, project_id: int) -> None:
    # Transactions and stock movements keep their rows, unlinked from the project
    project = _get_project_model(db, project_id)
    db.delete(project)
    db.commit()
    logger.info("Deleted project %s", project_id)


def update_project_status(db: Session, project_id: int, status_in: schemas.ProjectStatusUpdate) -> Dict[str, Any]:
    project = _get_project_model(db, project_id)
    previous = project.status
    project.status = status_in.status.value
    db.commit()
    db.refresh(project)
    logger.info("Project %s status %s -> %s", project.id, previous, project.status)
    return _serialize_project(project)


def _get_project_model(db: Session, project_id: int) -> models.Project:
    project = db.query(models.Project).filter(models.Project.id == project_id).first()
    if not project:
        raise NotFoundException("Projeto não encontrado")
    return project


def _serialize_project(project: models.Project) -> Dict[str, Any]:
    return {
        "id": project.id,
        "title": project.title,
        "client_id": project.client_id,
        "client_name": project.client.name if project.client is not None else None,
        "description": project.description,
        "status": project.status,
        "budget": project.budget,
        "start_date": project.start_date,
        "end_date": project.end_date,
        "labor_cost": project.labor_cost,
        "profit_margin": project.profit_margin,
        "lines": [
            {
                "id": line.id,
                "product_id": line.product_id,
                "product_name": line.product.name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "total_price": line.quantity * line.unit_price,
            }
            for line in project.lines or []
        ],
    }
