"""
Servizio per la dashboard
Progetto: ERP Manager (Gestionale ERP)

Contatori e totali per sezione. Ogni sezione e ogni tipo di record
viene interrogato solo se l'utente ha il permesso di vederlo.
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.navigation import visible_sections
from app.core.permissions import (
    CLIENT_TYPE_PERMISSIONS,
    CONTRACT_TYPE_PERMISSIONS,
    INVOICE_TYPE_PERMISSIONS,
    PAYMENT_TYPE_PERMISSIONS,
    HasPermissions,
    allowed_types,
)
from app.models import Client, Contract, Invoice, Payment, Project, User
from app.models.invoice import InvoiceStatus
from app.models.payment import PaymentStatus
from app.models.project import ProjectStatus
from app.schemas.dashboard import (
    ClientStats,
    ContractStats,
    DashboardStats,
    InvoiceStats,
    PaymentStats,
    ProjectStats,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class DashboardService:
    """Calcolo delle statistiche della dashboard."""

    async def get_stats(self, db: AsyncSession, claims: HasPermissions) -> DashboardStats:
        sections = visible_sections(claims)
        stats = DashboardStats()

        if "clients" in sections:
            counts = await self._grouped(db, Client.client_type, allowed_types(claims, CLIENT_TYPE_PERMISSIONS))
            stats.clients = ClientStats(
                customers=counts.get("CUSTOMER", (None,))[0],
                suppliers=counts.get("SUPPLIER", (None,))[0],
            )

        if "contracts" in sections:
            totals = await self._grouped(
                db, Contract.contract_type, allowed_types(claims, CONTRACT_TYPE_PERMISSIONS),
                amount=Contract.amount,
            )
            stats.contracts = ContractStats(
                sales_count=totals.get("SALES", (None, None))[0],
                sales_amount=totals.get("SALES", (None, None))[1],
                purchase_count=totals.get("PURCHASE", (None, None))[0],
                purchase_amount=totals.get("PURCHASE", (None, None))[1],
            )

        if "invoices" in sections:
            # Solo le fatture emesse concorrono agli importi
            amount = case((Invoice.status == InvoiceStatus.ISSUED.value, Invoice.total_amount), else_=0)
            totals = await self._grouped(
                db, Invoice.invoice_type, allowed_types(claims, INVOICE_TYPE_PERMISSIONS), amount=amount,
            )
            stats.invoices = InvoiceStats(
                issued_count=totals.get("ISSUED", (None, None))[0],
                issued_amount=totals.get("ISSUED", (None, None))[1],
                received_count=totals.get("RECEIVED", (None, None))[0],
                received_amount=totals.get("RECEIVED", (None, None))[1],
            )

        if "payments" in sections:
            amount = case((Payment.status == PaymentStatus.PAID.value, Payment.amount), else_=0)
            totals = await self._grouped(
                db, Payment.payment_type, allowed_types(claims, PAYMENT_TYPE_PERMISSIONS), amount=amount,
            )
            stats.payments = PaymentStats(
                receipt_count=totals.get("RECEIPT", (None, None))[0],
                receipt_amount=totals.get("RECEIPT", (None, None))[1],
                expense_count=totals.get("EXPENSE", (None, None))[0],
                expense_amount=totals.get("EXPENSE", (None, None))[1],
            )

        if "projects" in sections:
            result = await db.execute(
                select(
                    func.count(Project.id),
                    func.count(Project.id).filter(Project.status == ProjectStatus.IN_PROGRESS.value),
                )
            )
            total, in_progress = result.one()
            stats.projects = ProjectStats(total=total or 0, in_progress=in_progress or 0)

        if "users" in sections:
            result = await db.execute(select(func.count(User.id)))
            stats.users = result.scalar() or 0

        return stats

    async def _grouped(
        self,
        db: AsyncSession,
        type_column,
        types: list[str],
        amount: Any = None,
    ) -> dict[str, tuple]:
        """
        Conteggio (e somma di `amount`) per tipo, limitato ai tipi visibili.

        I tipi visibili senza record valgono (0, 0); quelli non visibili
        restano assenti dal risultato.
        """
        if not types:
            return {}

        columns = [type_column, func.count()]
        if amount is not None:
            columns.append(func.coalesce(func.sum(amount), 0))
        result = await db.execute(
            select(*columns).where(type_column.in_(types)).group_by(type_column)
        )

        empty = (0, ZERO) if amount is not None else (0,)
        grouped = {t: empty for t in types}
        for row in result.all():
            grouped[row[0]] = tuple(row[1:])
        return grouped


def get_dashboard_service() -> DashboardService:
    """Factory per ottenere il servizio della dashboard."""
    return DashboardService()


__all__ = ["DashboardService", "get_dashboard_service"]
