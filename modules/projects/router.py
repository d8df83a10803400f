from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.database import get_db
from modules.projects import schemas, service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=schemas.ProjectRead)
def create_project_endpoint(project_in: schemas.ProjectCreate, db: Session = Depends(get_db)):
    return service.create_project(db, project_in)


@router.get("", response_model=list[schemas.ProjectRead])
def list_projects_endpoint(db: Session = Depends(get_db)):
    return service.list_projects(db)


@router.get("/{project_id}", response_model=schemas.ProjectRead)
def get_project_endpoint(project_id: int, db: Session = Depends(get_db)):
    return service.get_project(db, project_id)


@router.patch("/{project_id}/status", response_model=schemas.ProjectRead)
def update_project_status_endpoint(
    project_id: int, status_in: schemas.ProjectStatusUpdate, db: Session = Depends(get_db)
):
    return service.update_project_status(db, project_id, status_in)


@router.put("/{project_id}", response_model=schemas.ProjectRead)
def update_project_endpoint(project_id: int, project_in: schemas.ProjectUpdate, db: Session = Depends(get_db)):
    return service.update_project(db, project_id, project_in)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project_endpoint(project_id: int, db: Session = Depends(get_db)):
    service.delete_project(db, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
