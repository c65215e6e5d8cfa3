"""
Mixin SQLAlchemy per modelli
Progetto: ERP Manager (Gestionale ERP)

Mixin riutilizzabili per aggiungere funzionalità comuni ai modelli.
"""

import datetime
import uuid

from sqlalchemy import DateTime, Uuid
from sqlalchemy import event
from sqlalchemy.orm import Mapped, mapped_column, Session
from sqlalchemy.sql import func


class TimestampMixin:
    """
    Mixin per gestione automatica timestamp creazione e aggiornamento.

    Aggiunge i campi:
    - created_at: data/ora di creazione record (impostato dal database)
    - updated_at: data/ora ultimo aggiornamento (aggiornato al flush)

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
            ...
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Data/ora di creazione del record",
    )

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Data/ora ultimo aggiornamento del record",
    )


class UUIDMixin:
    """Mixin per ID UUID generato lato applicazione."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="UUID primary key",
    )


# ------------------------------------------------------------
# Event Listeners
# ------------------------------------------------------------
@event.listens_for(Session, "before_flush")
def update_timestamp(session: Session, flush_context, instances) -> None:
    """
    Aggiorna updated_at per gli oggetti nuovi e per quelli effettivamente modificati.
    """
    now = datetime.datetime.now(datetime.timezone.utc)

    for obj in session.dirty:
        if hasattr(obj, "updated_at") and session.is_modified(obj, include_collections=False):
            obj.updated_at = now

    for obj in session.new:
        if hasattr(obj, "updated_at"):
            obj.updated_at = now
