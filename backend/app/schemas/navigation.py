"""
Schemas Pydantic per il menu di navigazione
Progetto: ERP Manager (Gestionale ERP)
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Requisito di una voce: nessuno, un permesso, oppure una lista "any-of"
PermissionRequirement = Optional[Union[str, list[str]]]


class NavChild(BaseModel):
    """Voce di secondo livello: ha sempre un percorso e un permesso."""

    model_config = ConfigDict(frozen=True)

    label: str
    path: str
    permission: Union[str, list[str]]


class NavItem(BaseModel):
    """
    Voce di primo livello.

    Una voce senza figli ha un percorso diretto; una voce con figli
    è un gruppo e compare solo se almeno un figlio è visibile.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    path: Optional[str] = None
    permission: PermissionRequirement = None
    children: tuple[NavChild, ...] = Field(default_factory=tuple)


class NavigationResponse(BaseModel):
    """Menu filtrato per l'utente corrente."""

    items: list[NavItem] = Field(default_factory=list)
    visible_sections: list[str] = Field(
        default_factory=list,
        description="Sezioni della dashboard visibili all'utente",
    )


__all__ = ["PermissionRequirement", "NavChild", "NavItem", "NavigationResponse"]
