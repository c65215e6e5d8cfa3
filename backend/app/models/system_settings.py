"""
Modello SQLAlchemy per le impostazioni di sistema
Progetto: ERP Manager (Gestionale ERP)
"""

from __future__ import annotations
import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

# Chiave fissa dell'unico record ammesso
SINGLETON_KEY = "default"


class SystemSettings(Base, UUIDMixin, TimestampMixin):
    """
    Impostazioni globali (record singleton).

    Se il record non esiste viene creato alla prima lettura con la
    ragione sociale di default. La colonna `singleton_key` è unica e
    ammette un solo valore, quindi la tabella non può contenere più
    di una riga.

    Attributes:
        company_name: Ragione sociale mostrata nell'interfaccia
        logo_url: URL pubblico del logo caricato
        bootstrap_completed_at: Momento in cui è stato creato l'amministratore
            iniziale; una volta valorizzato la procedura di bootstrap è chiusa
            per sempre, anche se la tabella utenti dovesse svuotarsi.
    """

    __tablename__ = "system_settings"

    singleton_key: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        default=SINGLETON_KEY,
    )

    company_name: Mapped[str] = mapped_column(String(200), nullable=False)

    logo_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        doc="URL del logo aziendale",
    )

    bootstrap_completed_at: Mapped[Optional[datetime.datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Data/ora di creazione dell'amministratore iniziale",
    )

    __table_args__ = (
        CheckConstraint(f"singleton_key = '{SINGLETON_KEY}'", name="ck_system_settings_singleton"),
    )

    def __repr__(self) -> str:
        return f"<SystemSettings(company_name={self.company_name})>"
