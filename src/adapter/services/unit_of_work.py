from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.coupon_repository import CouponRepository
from src.adapter.repositories.invoice_repository import InvoiceRepository
from src.adapter.repositories.outbox_event_repository import OutboxEventRepository
from src.adapter.repositories.proof_repository import ProofRepository
from src.adapter.repositories.seat_repository import SeatRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_repository import UserRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import WriteConflictError


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession, owns_session: bool = False):
        self.session = session
        # owned sessions are closed on every exit; the caller closes shared ones
        self.owns_session = owns_session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.seats = SeatRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.proofs = ProofRepository(self.session)
        self.coupons = CouponRepository(self.session)
        self.invoices = InvoiceRepository(self.session)
        self.outbox_events = OutboxEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()
        if self.owns_session:
            await self.session.close()

    async def commit(self):
        try:
            await self.session.commit()
        except IntegrityError as exc:
            raise WriteConflictError(str(exc.orig)) from exc

    async def rollback(self):
        await self.session.rollback()
