from abc import ABC, abstractmethod

from src.app.repositories.coupon_repository import ICouponRepository
from src.app.repositories.invoice_repository import IInvoiceRepository
from src.app.repositories.outbox_event_repository import IOutboxEventRepository
from src.app.repositories.proof_repository import IProofRepository
from src.app.repositories.seat_repository import ISeatRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    seats: ISeatRepository
    sessions: ISessionRepository
    proofs: IProofRepository
    coupons: ICouponRepository
    invoices: IInvoiceRepository
    outbox_events: IOutboxEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
