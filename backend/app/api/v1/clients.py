"""
Router FastAPI per l'entità Client
Progetto: ERP Manager (Gestionale ERP)

Definisce gli endpoint API per la gestione dei partner (clienti e fornitori).
La visibilità per tipo è verificata dal service in base ai permessi.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentClaims
from app.models.client import ClientType
from app.schemas.client import (
    ClientCreate,
    ClientList,
    ClientRead,
    ClientUpdate,
)
from app.services.client_service import ClientService, get_client_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/clients",
    tags=["Partner"],
)


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "/",
    name="partner_lista",
    summary="Lista partner",
    description="Recupera la lista paginata dei partner visibili all'utente, con filtro per tipo e ricerca.",
    response_model=ClientList,
    status_code=status.HTTP_200_OK,
)
async def get_clients(
    claims: CurrentClaims,
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca per nome, referente, telefono o email"),
    client_type: Optional[ClientType] = Query(None, description="CUSTOMER o SUPPLIER"),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientList:
    """
    Recupera la lista paginata dei partner.

    Senza filtro per tipo restituisce solo i tipi che l'utente può vedere
    (clienti con clients.customers, fornitori con clients.suppliers).

    Args:
        page: Numero pagina (default 1)
        per_page: Elementi per pagina (default 10, max 100)
        search: Termine di ricerca su nome, referente, telefono, email
        client_type: Filtro opzionale per tipo

    Returns:
        ClientList: Lista paginata con metadati

    Raises:
        AuthorizationError: se il tipo richiesto non è visibile all'utente
    """
    clients, total = await service.get_all(
        db, claims,
        page=page,
        per_page=per_page,
        search=search,
        client_type=client_type,
    )
    return ClientList(
        items=[ClientRead.model_validate(c) for c in clients],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/{client_id}",
    name="partner_dettaglio",
    summary="Dettaglio partner",
    response_model=ClientRead,
    status_code=status.HTTP_200_OK,
)
async def get_client(
    client_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    """
    Recupera i dettagli di un partner.

    Raises:
        NotFoundError: se il partner non esiste
        AuthorizationError: se l'utente non può vedere quel tipo di partner
    """
    client = await service.get_by_id(db, client_id, claims)
    return ClientRead.model_validate(client)


@router.post(
    "/",
    name="partner_crea",
    summary="Crea partner",
    description="Crea un nuovo cliente o fornitore.",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_client(
    client_data: ClientCreate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    """
    Crea un nuovo partner.

    Args:
        client_data: Dati del partner da creare

    Returns:
        ClientRead: Il partner creato

    Raises:
        AuthorizationError: se l'utente non gestisce quel tipo di partner
    """
    client = await service.create(db, claims, client_data)
    await db.commit()
    return ClientRead.model_validate(client)


@router.put(
    "/{client_id}",
    name="partner_aggiorna",
    summary="Aggiorna partner",
    response_model=ClientRead,
    status_code=status.HTTP_200_OK,
)
async def update_client(
    client_id: uuid.UUID,
    client_data: ClientUpdate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    """Sostituisce i dati di un partner esistente."""
    client = await service.update(db, claims, client_id, client_data)
    await db.commit()
    return ClientRead.model_validate(client)


@router.delete(
    "/{client_id}",
    name="partner_elimina",
    summary="Elimina partner",
    description="Elimina un partner. Non consentito se contratti, fatture o pagamenti lo referenziano.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_client(
    client_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> None:
    """
    Elimina un partner.

    Raises:
        NotFoundError: se il partner non esiste
        ConflictError: se contratti, fatture o pagamenti lo referenziano
    """
    await service.delete(db, claims, client_id)
    await db.commit()
