"""
Modello SQLAlchemy per l'entità User
Progetto: ERP Manager (Gestionale ERP)

Modello per l'autenticazione e la gestione dei permessi degli utenti.
"""

from __future__ import annotations
from typing import List

from sqlalchemy import Boolean, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """
    Modello per gli utenti del sistema.

    Gestisce l'autenticazione e le autorizzazioni per l'accesso
    alle funzionalità del gestionale.

    Attributes:
        id: UUID primary key, generato automaticamente
        username: Nome utente univoco
        hashed_password: Password hashata (bcrypt)
        permissions: Elenco dei permessi (stringhe puntate, es. 'contracts.sales')
        is_admin: Se True l'utente supera ogni controllo di permesso
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        doc="Nome utente univoco",
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Password hashata",
    )

    permissions: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        doc="Permessi assegnati all'utente",
    )

    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        doc="Amministratore (bypass dei permessi)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, is_admin={self.is_admin})>"
