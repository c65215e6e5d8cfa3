"""
Router FastAPI per l'entità Project
Progetto: ERP Manager (Gestionale ERP)

Tutti gli endpoint richiedono il permesso `projects`.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_permission
from app.core.permissions import Permission
from app.models.project import ProjectStatus
from app.schemas.project import (
    ProjectCreate,
    ProjectDetail,
    ProjectList,
    ProjectRead,
    ProjectUpdate,
)
from app.services.project_service import ProjectService, build_project_read, get_project_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/projects",
    tags=["Progetti"],
    dependencies=[Depends(require_permission(Permission.PROJECTS.value))],
)


@router.get(
    "/",
    name="progetti_lista",
    summary="Lista progetti",
    description="Lista paginata dei progetti con numero di contratti e margine.",
    response_model=ProjectList,
)
async def get_projects(
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca per nome o descrizione"),
    project_status: Optional[ProjectStatus] = Query(None, alias="status", description="Filtro per stato"),
    db: AsyncSession = Depends(get_db),
    service: ProjectService = Depends(get_project_service),
) -> ProjectList:
    projects, total = await service.get_all(
        db, page=page, per_page=per_page, search=search, status=project_status,
    )
    return ProjectList(
        items=[build_project_read(p) for p in projects],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/{project_id}",
    name="progetto_dettaglio",
    summary="Dettaglio progetto",
    description="Progetto con contratti collegati e margine lordo.",
    response_model=ProjectDetail,
)
async def get_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetail:
    project = await service.get_by_id(db, project_id)
    return build_project_read(project, detail=True)


@router.post(
    "/",
    name="progetto_crea",
    summary="Crea progetto",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    service: ProjectService = Depends(get_project_service),
) -> ProjectRead:
    project = await service.create(db, data)
    await db.commit()
    return build_project_read(project)


@router.put(
    "/{project_id}",
    name="progetto_aggiorna",
    summary="Aggiorna progetto",
    response_model=ProjectRead,
)
async def update_project(
    project_id: uuid.UUID,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    service: ProjectService = Depends(get_project_service),
) -> ProjectRead:
    project = await service.update(db, project_id, data)
    await db.commit()
    return build_project_read(project)


@router.delete(
    "/{project_id}",
    name="progetto_elimina",
    summary="Elimina progetto",
    description="Elimina il progetto; i contratti collegati restano senza progetto.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: ProjectService = Depends(get_project_service),
) -> None:
    await service.delete(db, project_id)
    await db.commit()
