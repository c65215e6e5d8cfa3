"""
Router FastAPI per l'entità Invoice
Progetto: ERP Manager (Gestionale ERP)

Fatture emesse e ricevute, con numerazione mensile automatica.
"""

import datetime
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentClaims
from app.models.invoice import InvoiceStatus, InvoiceType
from app.schemas.common import NextNumberResponse
from app.schemas.invoice import (
    InvoiceCreate,
    InvoiceDetail,
    InvoiceList,
    InvoiceRead,
    InvoiceUpdate,
)
from app.services.invoice_service import InvoiceService, get_invoice_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/invoices",
    tags=["Fatture"],
)


@router.get(
    "/",
    name="fatture_lista",
    summary="Lista fatture",
    description="Lista paginata delle fatture visibili all'utente, con filtri per tipo, stato, partner, contratto e data.",
    response_model=InvoiceList,
)
async def get_invoices(
    claims: CurrentClaims,
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca per numero, partner, contratto o progetto"),
    invoice_type: Optional[InvoiceType] = Query(None, description="ISSUED o RECEIVED"),
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status", description="UNISSUED o ISSUED"),
    client_id: Optional[uuid.UUID] = Query(None),
    contract_id: Optional[uuid.UUID] = Query(None),
    date_from: Optional[datetime.date] = Query(None, description="Data fattura dal"),
    date_to: Optional[datetime.date] = Query(None, description="Data fattura al"),
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceList:
    invoices, total = await service.get_all(
        db, claims,
        page=page,
        per_page=per_page,
        search=search,
        status=invoice_status,
        client_id=client_id,
        contract_id=contract_id,
        invoice_type=invoice_type,
        date_from=date_from,
        date_to=date_to,
    )
    return InvoiceList(
        items=[InvoiceRead.model_validate(i) for i in invoices],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/next-number",
    name="fattura_prossimo_numero",
    summary="Anteprima prossimo numero fattura",
    description="Numero che verrebbe assegnato ora. Non riserva il numero.",
    response_model=NextNumberResponse,
)
async def get_next_invoice_number(
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> NextNumberResponse:
    return NextNumberResponse(number=await service.peek_next_number(db))


@router.get(
    "/{invoice_id}",
    name="fattura_dettaglio",
    summary="Dettaglio fattura",
    description="Fattura con partner, contratto e pagamenti collegati.",
    response_model=InvoiceDetail,
)
async def get_invoice(
    invoice_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceDetail:
    invoice = await service.get_by_id(db, invoice_id, claims, with_payments=True)
    return InvoiceDetail.model_validate(invoice)


@router.post(
    "/",
    name="fattura_crea",
    summary="Crea fattura",
    description=(
        "Crea una fattura. Se `invoice_number` è omesso viene assegnato "
        "il prossimo numero del mese (YYYYMM-NN)."
    ),
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    data: InvoiceCreate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    invoice = await service.create(db, claims, data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.put(
    "/{invoice_id}",
    name="fattura_aggiorna",
    summary="Aggiorna fattura",
    response_model=InvoiceRead,
)
async def update_invoice(
    invoice_id: uuid.UUID,
    data: InvoiceUpdate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    invoice = await service.update(db, claims, invoice_id, data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.post(
    "/{invoice_id}/issue",
    name="fattura_emetti",
    summary="Emetti fattura",
    description="Porta una fattura pre-registrata allo stato ISSUED con data odierna.",
    response_model=InvoiceRead,
)
async def issue_invoice(
    invoice_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    invoice = await service.issue(db, claims, invoice_id)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.delete(
    "/{invoice_id}",
    name="fattura_elimina",
    summary="Elimina fattura",
    description="Elimina la fattura; i pagamenti collegati restano senza fattura.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_invoice(
    invoice_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> None:
    await service.delete(db, claims, invoice_id)
    await db.commit()
