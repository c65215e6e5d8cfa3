"""
Schemas Pydantic per le impostazioni di sistema
Progetto: ERP Manager (Gestionale ERP)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SystemSettingsRead(BaseModel):
    """Impostazioni pubbliche (leggibili anche senza login)."""

    model_config = ConfigDict(from_attributes=True)

    company_name: str
    logo_url: Optional[str] = None
    updated_at: Optional[datetime] = None


class SystemSettingsUpdate(BaseModel):
    """Aggiornamento delle impostazioni (solo admin)."""

    company_name: str = Field(..., max_length=200, description="Ragione sociale")

    @field_validator("company_name")
    @classmethod
    def validate_company_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("La ragione sociale non può essere vuota")
        return v


__all__ = ["SystemSettingsRead", "SystemSettingsUpdate"]
