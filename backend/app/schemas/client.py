"""
Schemas Pydantic per l'entità Client
Progetto: ERP Manager (Gestionale ERP)
"""
# Definisce gli schemi di validazione e serializzazione per l'API.

import datetime
import re
import uuid
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
)

from app.models.client import ClientType
from app.schemas.common import total_pages


# -------------------------------------------------------------------
# Funzioni di normalizzazione e validazione
# -------------------------------------------------------------------

def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalizza il numero di telefono.

    Rimuove spazi, trattini e punti; accetta solo + iniziale e cifre.

    Args:
        phone: Numero di telefono da normalizzare

    Returns:
        Numero di telefono normalizzato o None

    Raises:
        ValueError: Se il formato non è valido
    """
    if phone is None:
        return None

    normalized = re.sub(r"[\s\-.]", "", phone.strip())
    if not normalized:
        return None

    # Regex: + seguito da numeri, oppure solo numeri
    if not re.match(r"^\+?\d+$", normalized):
        raise ValueError("Numero di telefono non valido")

    return normalized


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


# -------------------------------------------------------------------
# Schemas
# -------------------------------------------------------------------
class ClientBase(BaseModel):
    """
    Schema base per i dati anagrafici del partner.

    Configurazione:
    - from_attributes=True: supporta conversione ORM → Pydantic
    - use_enum_values=True: l'ORM riceve stringhe invece di oggetti Enum
    """

    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Ragione sociale o nome",
    )

    contact_name: Optional[str] = Field(None, max_length=100, description="Referente")
    phone: Optional[str] = Field(None, max_length=50, description="Telefono")
    email: Optional[EmailStr] = Field(None, description="Indirizzo email")
    address: Optional[str] = Field(None, max_length=255, description="Indirizzo")

    client_type: ClientType = Field(
        default=ClientType.CUSTOMER,
        description="Tipo partner: 'CUSTOMER' o 'SUPPLIER'",
    )

    notes: Optional[str] = Field(None, description="Note")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Il nome del partner è obbligatorio")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v)

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_to_none(cls, v):
        # I form inviano stringhe vuote per i campi non compilati
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("contact_name", "address", "notes")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ClientCreate(ClientBase):
    """Schema per la creazione di un partner."""


class ClientUpdate(ClientBase):
    """
    Schema per l'aggiornamento di un partner.

    L'aggiornamento sostituisce l'intero record (PUT).
    """


class ClientRead(ClientBase):
    """Schema per la risposta API che include i campi di sistema."""

    id: uuid.UUID = Field(..., description="UUID del partner")
    created_at: datetime.datetime = Field(..., description="Data/ora di creazione")
    updated_at: datetime.datetime = Field(..., description="Data/ora ultimo aggiornamento")


# -------------------------------------------------------------------
# Schemas per Lista Paginata
# -------------------------------------------------------------------
class ClientList(BaseModel):
    """
    Schema per risposte paginate.

    Include la lista dei partner con metadati di paginazione.
    """

    model_config = ConfigDict(from_attributes=True)

    items: list[ClientRead] = Field(default_factory=list, description="Lista dei partner")
    total: int = Field(..., ge=0, description="Numero totale di partner")
    page: int = Field(..., ge=1, description="Numero pagina corrente")
    per_page: int = Field(..., ge=1, description="Numero elementi per pagina")

    @computed_field
    def total_pages(self) -> int:
        """Numero totale di pagine: ceil(total / per_page)."""
        return total_pages(self.total, self.per_page)


__all__ = [
    "normalize_phone",
    "ClientBase",
    "ClientCreate",
    "ClientUpdate",
    "ClientRead",
    "ClientList",
]
