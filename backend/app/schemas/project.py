"""
Schemas Pydantic per l'entità Project
Progetto: ERP Manager (Gestionale ERP)
"""

import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from app.models.project import ProjectStatus
from app.schemas.common import ContractRef, total_pages
from app.schemas.settlement import ProjectMargin


class ProjectBase(BaseModel):
    """Campi condivisi tra creazione e aggiornamento."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=200, description="Nome progetto")
    description: Optional[str] = Field(None, description="Descrizione")
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING, description="Stato del progetto")
    start_date: Optional[datetime.date] = Field(None, description="Data di inizio")
    end_date: Optional[datetime.date] = Field(None, description="Data di fine")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Il nome del progetto è obbligatorio")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "ProjectBase":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("La data di fine non può precedere la data di inizio")
        return self


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(ProjectBase):
    pass


class ProjectRead(ProjectBase):
    """
    Progetto con i dati calcolati.

    `margin` è None se il calcolo non è disponibile.
    """

    id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime
    contract_count: int = Field(default=0, ge=0)
    margin: Optional[ProjectMargin] = None


class ProjectDetail(ProjectRead):
    """Progetto con l'elenco dei contratti collegati."""

    contracts: list[ContractRef] = Field(default_factory=list)


class ProjectList(BaseModel):
    """Lista paginata di progetti."""

    items: list[ProjectRead] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)

    @computed_field
    def total_pages(self) -> int:
        return total_pages(self.total, self.per_page)


__all__ = [
    "ProjectBase",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "ProjectDetail",
    "ProjectList",
]
