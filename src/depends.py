from typing import Callable, Dict

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.json_rpc_ledger_client import JsonRpcLedgerClient
from src.adapter.services.local_blob_storage import LocalBlobStorage
from src.adapter.services.stripe_payment_gateway import StripePaymentGateway
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.blob_storage import IBlobStorage
from src.app.services.ledger_client import ILedgerClient
from src.app.services.payment_gateway import IPaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.pipeline import EventHandler, PendingEvent
from src.app.use_cases.proofs import AnchorUsageRecordUseCase
from src.app.use_cases.settlement import SettleInvoiceUseCase
from src.domain.entities import OutboxEventType

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Provider clients are created once per process
blob_storage = LocalBlobStorage(ApplicationConfig.BLOB_STORAGE_ROOT)
ledger_client = JsonRpcLedgerClient(
    rpc_url=ApplicationConfig.LEDGER_RPC_URL,
    account=ApplicationConfig.LEDGER_ACCOUNT,
    chain_id=ApplicationConfig.LEDGER_CHAIN_ID,
    gas_limit=ApplicationConfig.LEDGER_GAS_LIMIT,
    confirmation_timeout=ApplicationConfig.LEDGER_CONFIRMATION_TIMEOUT,
    poll_interval=ApplicationConfig.LEDGER_POLL_INTERVAL,
)
payment_gateway = StripePaymentGateway(
    secret_key=ApplicationConfig.STRIPE_SECRET_KEY,
    webhook_secret=ApplicationConfig.STRIPE_WEBHOOK_SECRET,
    currency=ApplicationConfig.PAYMENT_CURRENCY,
)


def new_unit_of_work() -> UnitOfWork:
    """Unit of work owning a fresh database session, for background jobs"""
    return SqlAlchemyUnitOfWork(AsyncSessionLocal(), owns_session=True)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_uow_factory() -> Callable[[], UnitOfWork]:
    return new_unit_of_work


def get_blob_storage() -> IBlobStorage:
    return blob_storage


def get_ledger_client() -> ILedgerClient:
    return ledger_client


def get_payment_gateway() -> IPaymentGateway:
    return payment_gateway


def build_event_handlers(
    uow_factory: Callable[[], UnitOfWork],
    storage: IBlobStorage,
    ledger: ILedgerClient,
    gateway: IPaymentGateway,
) -> Dict[OutboxEventType, EventHandler]:
    """Outbox event type -> pipeline stage"""

    async def anchor_usage_record(event: PendingEvent):
        use_case = AnchorUsageRecordUseCase(
            uow_factory(),
            storage,
            ledger,
            inline_limit=ApplicationConfig.LEDGER_INLINE_PAYLOAD_LIMIT,
        )
        return await use_case.execute(event.aggregate_id)

    async def settle_invoice(event: PendingEvent):
        use_case = SettleInvoiceUseCase(
            uow_factory(),
            gateway,
            max_attempts=ApplicationConfig.PAYMENT_MAX_ATTEMPTS,
            retry_base_delay=ApplicationConfig.PAYMENT_RETRY_BASE_DELAY,
        )
        return await use_case.execute(event.aggregate_id)

    return {
        OutboxEventType.session_ended: anchor_usage_record,
        OutboxEventType.invoice_created: settle_invoice,
    }


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
