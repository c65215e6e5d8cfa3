"""
Router FastAPI per l'entità Contract
Progetto: ERP Manager (Gestionale ERP)

Definisce gli endpoint API per contratti di vendita e di acquisto.
"""

import datetime
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentClaims
from app.models.contract import ContractStatus, ContractType
from app.schemas.contract import (
    ContractCreate,
    ContractDetail,
    ContractList,
    ContractRead,
    ContractUpdate,
)
from app.services.contract_service import ContractService, build_contract_read, get_contract_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/contracts",
    tags=["Contratti"],
)


@router.get(
    "/",
    name="contratti_lista",
    summary="Lista contratti",
    description=(
        "Lista paginata dei contratti con avanzamento di fatturazione e pagamento. "
        "`for_invoices` / `for_payments` restituiscono solo i contratti ancora aperti, "
        "per i form di fatture e pagamenti."
    ),
    response_model=ContractList,
)
async def get_contracts(
    claims: CurrentClaims,
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca per numero, oggetto, partner o progetto"),
    contract_status: Optional[ContractStatus] = Query(None, alias="status", description="Stato di firma"),
    contract_type: Optional[ContractType] = Query(None, description="SALES o PURCHASE"),
    client_id: Optional[uuid.UUID] = Query(None, description="Filtro per partner"),
    project_id: Optional[uuid.UUID] = Query(None, description="Filtro per progetto"),
    start_from: Optional[datetime.date] = Query(None, description="Data inizio dal"),
    start_to: Optional[datetime.date] = Query(None, description="Data inizio al"),
    for_invoices: bool = Query(False, description="Solo contratti non completamente fatturati"),
    for_payments: bool = Query(False, description="Solo contratti non completamente pagati"),
    include_drafts: Optional[bool] = Query(
        None,
        description="Conta anche fatture non emesse e pagamenti non pagati nell'avanzamento",
    ),
    db: AsyncSession = Depends(get_db),
    service: ContractService = Depends(get_contract_service),
) -> ContractList:
    items, total = await service.get_all(
        db, claims,
        page=page,
        per_page=per_page,
        search=search,
        status=contract_status,
        client_id=client_id,
        project_id=project_id,
        contract_type=contract_type,
        start_from=start_from,
        start_to=start_to,
        for_invoices=for_invoices,
        for_payments=for_payments,
        include_drafts=include_drafts,
    )
    return ContractList(items=items, total=total, page=page, per_page=per_page)


@router.get(
    "/{contract_id}",
    name="contratto_dettaglio",
    summary="Dettaglio contratto",
    description="Contratto con fatture e pagamenti collegati e avanzamento.",
    response_model=ContractDetail,
)
async def get_contract(
    contract_id: uuid.UUID,
    claims: CurrentClaims,
    include_drafts: bool = Query(False, description="Conta anche i documenti non definitivi"),
    db: AsyncSession = Depends(get_db),
    service: ContractService = Depends(get_contract_service),
) -> ContractDetail:
    return await service.get_detail(db, contract_id, claims, include_drafts=include_drafts)


@router.post(
    "/",
    name="contratto_crea",
    summary="Crea contratto",
    response_model=ContractRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_contract(
    data: ContractCreate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ContractService = Depends(get_contract_service),
) -> ContractRead:
    contract = await service.create(db, claims, data)
    await db.commit()
    return build_contract_read(contract)


@router.put(
    "/{contract_id}",
    name="contratto_aggiorna",
    summary="Aggiorna contratto",
    response_model=ContractRead,
)
async def update_contract(
    contract_id: uuid.UUID,
    data: ContractUpdate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ContractService = Depends(get_contract_service),
) -> ContractRead:
    contract = await service.update(db, claims, contract_id, data)
    await db.commit()
    return build_contract_read(contract)


@router.delete(
    "/{contract_id}",
    name="contratto_elimina",
    summary="Elimina contratto",
    description="Elimina il contratto; fatture e pagamenti collegati restano senza contratto.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_contract(
    contract_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: ContractService = Depends(get_contract_service),
) -> None:
    await service.delete(db, claims, contract_id)
    await db.commit()
