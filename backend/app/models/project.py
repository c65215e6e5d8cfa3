"""
Modello SQLAlchemy per l'entità Project
Progetto: ERP Manager (Gestionale ERP)
"""

from __future__ import annotations
import datetime
from enum import Enum
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.contract import Contract


class ProjectStatus(str, Enum):
    """Stati di avanzamento del progetto."""
    PLANNING = "PLANNING"
    IN_PROGRESS = "IN_PROGRESS"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Project(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i progetti.

    Un progetto raggruppa contratti di vendita e di acquisto: il margine
    lordo del progetto è calcolato su di essi a ogni lettura.
    """

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ProjectStatus.PLANNING.value,
        doc="Stato del progetto",
    )
    start_date: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)

    contracts: Mapped[List["Contract"]] = relationship(
        "Contract",
        back_populates="project",
        lazy="noload",
        doc="Contratti collegati al progetto",
    )

    __table_args__ = (
        Index("ix_projects_status", "status"),
        CheckConstraint(
            "status IN ('PLANNING', 'IN_PROGRESS', 'PAUSED', 'COMPLETED', 'CANCELLED')",
            name="ck_projects_status",
        ),
    )

    def __repr__(self) -> str:
        return f"Project(name={self.name!r}, status={self.status!r})"
