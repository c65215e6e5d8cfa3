"""
Router FastAPI per l'entità Payment
Progetto: ERP Manager (Gestionale ERP)

Incassi (RECEIPT) e pagamenti (EXPENSE), con numerazione mensile automatica.
"""

import datetime
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentClaims
from app.models.payment import PaymentStatus, PaymentType
from app.schemas.common import NextNumberResponse
from app.schemas.payment import PaymentCreate, PaymentList, PaymentRead, PaymentUpdate
from app.services.payment_service import PaymentService, get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/payments",
    tags=["Incassi e pagamenti"],
)


@router.get(
    "/",
    name="movimenti_lista",
    summary="Lista incassi e pagamenti",
    response_model=PaymentList,
)
async def get_payments(
    claims: CurrentClaims,
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca per numero, riferimento, partner, contratto o fattura"),
    payment_type: Optional[PaymentType] = Query(None, description="RECEIPT o EXPENSE"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="status", description="UNPAID o PAID"),
    client_id: Optional[uuid.UUID] = Query(None),
    contract_id: Optional[uuid.UUID] = Query(None),
    invoice_id: Optional[uuid.UUID] = Query(None),
    date_from: Optional[datetime.date] = Query(None, description="Data pagamento dal"),
    date_to: Optional[datetime.date] = Query(None, description="Data pagamento al"),
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentList:
    payments, total = await service.get_all(
        db, claims,
        page=page,
        per_page=per_page,
        search=search,
        payment_type=payment_type,
        status=payment_status,
        client_id=client_id,
        contract_id=contract_id,
        invoice_id=invoice_id,
        date_from=date_from,
        date_to=date_to,
    )
    return PaymentList(
        items=[PaymentRead.model_validate(p) for p in payments],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/next-number",
    name="movimento_prossimo_numero",
    summary="Anteprima prossimo numero movimento",
    description="Numero che verrebbe assegnato ora. Non riserva il numero.",
    response_model=NextNumberResponse,
)
async def get_next_payment_number(
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> NextNumberResponse:
    return NextNumberResponse(number=await service.peek_next_number(db))


@router.get(
    "/{payment_id}",
    name="movimento_dettaglio",
    summary="Dettaglio movimento",
    response_model=PaymentRead,
)
async def get_payment(
    payment_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    payment = await service.get_by_id(db, payment_id, claims)
    return PaymentRead.model_validate(payment)


@router.post(
    "/",
    name="movimento_crea",
    summary="Registra incasso o pagamento",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_payment(
    data: PaymentCreate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    payment = await service.create(db, claims, data)
    await db.commit()
    return PaymentRead.model_validate(payment)


@router.put(
    "/{payment_id}",
    name="movimento_aggiorna",
    summary="Aggiorna movimento",
    response_model=PaymentRead,
)
async def update_payment(
    payment_id: uuid.UUID,
    data: PaymentUpdate,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    payment = await service.update(db, claims, payment_id, data)
    await db.commit()
    return PaymentRead.model_validate(payment)


@router.post(
    "/{payment_id}/mark-paid",
    name="movimento_segna_pagato",
    summary="Segna come pagato",
    description="Porta un movimento pre-registrato allo stato PAID.",
    response_model=PaymentRead,
)
async def mark_payment_paid(
    payment_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    payment = await service.mark_paid(db, claims, payment_id)
    await db.commit()
    return PaymentRead.model_validate(payment)


@router.delete(
    "/{payment_id}",
    name="movimento_elimina",
    summary="Elimina movimento",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_payment(
    payment_id: uuid.UUID,
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> None:
    await service.delete(db, claims, payment_id)
    await db.commit()
