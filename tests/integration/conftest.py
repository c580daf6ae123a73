from datetime import datetime, UTC

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    get_blob_storage,
    get_ledger_client,
    get_payment_gateway,
    get_unit_of_work,
    get_uow_factory,
)
from src.domain.entities import Seat, User
from tests.fakes import FakeLedgerClient, FakePaymentGateway, InMemoryBlobStorage



@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def uow_factory(session_factory):
    def factory():
        return SqlAlchemyUnitOfWork(session_factory(), owns_session=True)

    return factory


@pytest.fixture
def blob_storage():
    return InMemoryBlobStorage()


@pytest.fixture
def ledger():
    return FakeLedgerClient()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest_asyncio.fixture
async def seed(session_factory):
    """Persist entities directly, bypassing the API"""

    async def add(*entities):
        async with session_factory() as session:
            for entity in entities:
                session.add(entity)
            await session.commit()

    return add


@pytest_asyncio.fixture
async def fetch(session_factory):
    """Load a fresh copy of a row by primary key"""

    async def get(model, key):
        async with session_factory() as session:
            return await session.get(model, key)

    return get


@pytest_asyncio.fixture
async def billing_fixture(seed):
    """A registered user with payment details and two seats"""
    user = User(
        id="user-1",
        email="member@example.com",
        display_name="Member One",
        payment_customer_ref="cus_1",
        default_payment_method_ref="pm_1",
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )
    seats = [
        Seat(id="pc01", name="PC 01", branch_name="Shibuya", hourly_rate=600),
        Seat(id="pc02", name="PC 02", branch_name="Shibuya", hourly_rate=800),
    ]
    await seed(user, *seats)
    return user


@pytest_asyncio.fixture
async def client(session_factory, uow_factory, blob_storage, ledger, gateway):
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    app.dependency_overrides[get_ledger_client] = lambda: ledger
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
