"""
Service Layer per l'entità Project
Progetto: ERP Manager (Gestionale ERP)
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError
from app.models import Contract, Project
from app.models.project import ProjectStatus
from app.schemas.project import ProjectCreate, ProjectDetail, ProjectRead, ProjectUpdate
from app.services.settlement import project_margin

logger = logging.getLogger(__name__)


def build_project_read(project: Project, detail: bool = False) -> ProjectRead:
    """
    Progetto con numero di contratti e margine.

    Se il margine non è calcolabile (importi non validi) il campo
    resta None e la richiesta prosegue.
    """
    contracts = list(project.contracts or [])
    try:
        margin = project_margin(contracts)
    except (ArithmeticError, TypeError, ValueError) as e:
        logger.warning("Margine non calcolabile per il progetto %s: %s", project.id, e)
        margin = None

    schema = ProjectDetail if detail else ProjectRead
    data = schema.model_validate(project)
    return data.model_copy(update={"contract_count": len(contracts), "margin": margin})


class ProjectService:
    """Service per la gestione dei progetti."""

    def _base_query(self):
        return select(Project).options(selectinload(Project.contracts))

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
    ) -> tuple[list[Project], int]:
        """Lista paginata dei progetti, più recenti prima, con i contratti caricati."""
        conditions = []
        if search:
            term = f"%{search}%"
            conditions.append(or_(Project.name.ilike(term), Project.description.ilike(term)))
        if status is not None:
            conditions.append(Project.status == ProjectStatus(status).value)

        query = (
            self._base_query()
            .where(*conditions)
            .order_by(Project.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await db.execute(query)
        projects = list(result.scalars().all())

        count_result = await db.execute(select(func.count()).select_from(Project).where(*conditions))
        total = count_result.scalar() or 0
        return projects, total

    async def get_by_id(self, db: AsyncSession, project_id: uuid.UUID) -> Project:
        """
        Raises:
            NotFoundError: Se il progetto non esiste
        """
        result = await db.execute(
            self._base_query()
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        project = result.scalar_one_or_none()
        if not project:
            raise NotFoundError(f"Progetto {project_id} non trovato")
        return project

    async def create(self, db: AsyncSession, data: ProjectCreate) -> Project:
        project = Project(**data.model_dump())
        db.add(project)
        await db.flush()
        logger.info("Creato progetto: %s - %s", project.id, project.name)
        return await self.get_by_id(db, project.id)

    async def update(self, db: AsyncSession, project_id: uuid.UUID, data: ProjectUpdate) -> Project:
        """Sostituisce i campi del progetto."""
        project = await self.get_by_id(db, project_id)
        for key, value in data.model_dump().items():
            setattr(project, key, value)
        await db.flush()
        logger.info("Aggiornato progetto: %s", project.id)
        return await self.get_by_id(db, project.id)

    async def delete(self, db: AsyncSession, project_id: uuid.UUID) -> None:
        """
        Elimina un progetto.

        I contratti collegati restano, senza progetto.
        """
        project = await self.get_by_id(db, project_id)
        await db.execute(
            update(Contract).where(Contract.project_id == project_id).values(project_id=None)
        )
        await db.delete(project)
        await db.flush()
        logger.info("Eliminato progetto: %s - %s", project.id, project.name)


def get_project_service() -> ProjectService:
    """Factory per ottenere un'istanza del ProjectService."""
    return ProjectService()


__all__ = ["ProjectService", "get_project_service", "build_project_read"]
