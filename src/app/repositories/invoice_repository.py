from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import Invoice


class IInvoiceRepository(ABC):
    """Invoice repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID"""
        pass

    @abstractmethod
    async def exists_for_period(self, period_string: str) -> bool:
        """True if any invoice was generated for the period"""
        pass

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """Create a new invoice"""
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """Update existing invoice"""
        pass
