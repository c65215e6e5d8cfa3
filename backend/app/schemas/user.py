"""
Schemas Pydantic per l'entità User
Progetto: ERP Manager (Gestionale ERP)

Schemas per validazione e serializzazione dati utente.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.schemas.common import total_pages


def _clean_username(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Lo username non può essere vuoto")
    return v


class UserCreate(BaseModel):
    """
    Schema per la creazione di un nuovo utente (solo admin).

    La lunghezza minima della password è verificata dal servizio,
    perché dipende dalla configurazione (`min_password_length`).

    Attributes:
        username: Nome utente (deve essere univoco)
        password: Password in chiaro
        permissions: Permessi da assegnare
        is_admin: Crea un amministratore
    """

    username: str = Field(..., min_length=1, max_length=50, description="Nome utente univoco")
    password: str = Field(..., min_length=1, max_length=100, description="Password in chiaro")
    permissions: list[str] = Field(default_factory=list, description="Permessi dell'utente")
    is_admin: bool = Field(default=False, description="Flag amministratore")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _clean_username(v)


class InitAdminRequest(BaseModel):
    """Credenziali dell'amministratore iniziale (bootstrap)."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=100)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _clean_username(v)


class UserLogin(BaseModel):
    """
    Schema per il login utente.

    Attributes:
        username: Nome utente
        password: Password in chiaro
    """

    username: str = Field(..., description="Nome utente")
    password: str = Field(..., description="Password in chiaro")


class UserUpdate(BaseModel):
    """
    Schema per l'aggiornamento di un utente.

    Tutti i campi sono opzionali: vengono applicati solo quelli forniti.
    """

    username: Optional[str] = Field(None, min_length=1, max_length=50)
    password: Optional[str] = Field(None, min_length=1, max_length=100)
    permissions: Optional[list[str]] = Field(None)
    is_admin: Optional[bool] = Field(None)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _clean_username(v)


class UserResponse(BaseModel):
    """
    Schema per la risposta con i dati utente.

    La password hashata non è mai esposta.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    permissions: list[str] = Field(default_factory=list)
    is_admin: bool
    created_at: datetime
    updated_at: datetime


class UserList(BaseModel):
    """Lista paginata di utenti."""

    items: list[UserResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)

    @computed_field
    def total_pages(self) -> int:
        return total_pages(self.total, self.per_page)


__all__ = [
    "UserCreate",
    "InitAdminRequest",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "UserList",
]
