"""
Modelli Database SQLAlchemy
Progetto: ERP Manager (Gestionale ERP)

Import centralizzato di tutti i modelli per `reset_db.py` e usage generico.

Modelli:
- Client: Anagrafica partner (clienti e fornitori)
- Project: Progetti
- Contract: Contratti di vendita e di acquisto
- Invoice: Fatture emesse e ricevute
- Payment: Incassi e pagamenti
- User: Utenti e permessi
- SystemSettings: Impostazioni di sistema (singleton)
- DocumentSequence: Contatori mensili per la numerazione documenti
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


from app.models.client import Client, ClientType
from app.models.project import Project, ProjectStatus
from app.models.contract import Contract, ContractStatus, ContractType
from app.models.invoice import Invoice, InvoiceStatus, InvoiceType
from app.models.payment import Payment, PaymentMethod, PaymentStatus, PaymentType
from app.models.user import User
from app.models.system_settings import SystemSettings
from app.models.document_sequence import DocumentSequence, SequenceType

__all__ = [
    "Base",
    "Client",
    "ClientType",
    "Project",
    "ProjectStatus",
    "Contract",
    "ContractStatus",
    "ContractType",
    "Invoice",
    "InvoiceStatus",
    "InvoiceType",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentType",
    "User",
    "SystemSettings",
    "DocumentSequence",
    "SequenceType",
]
