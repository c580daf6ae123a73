from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invoice_repository import IInvoiceRepository
from src.domain.entities import Invoice
from src.domain.errors import WriteConflictError


class InvoiceRepository(IInvoiceRepository):
    """Invoice repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID"""
        stmt = select(Invoice).where(Invoice.id == invoice_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def exists_for_period(self, period_string: str) -> bool:
        """True if any invoice exists for the period"""
        stmt = select(Invoice.id).where(Invoice.period_string == period_string).limit(1)
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice.

        Raises:
            WriteConflictError: an invoice for the same user and period exists
        """
        self.session.add(invoice)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise WriteConflictError(f"Invoice {invoice.id} already exists") from exc
        await self.session.refresh(invoice)
        return invoice

    async def update(self, invoice: Invoice) -> Invoice:
        """Update existing invoice"""
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice
