import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.json_loader import TestDataLoader
from tests.utils.fakes import FakeEmailSender
from src.depends import get_email_sender, get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.rate_limit import limiter



@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def outbox():
    return FakeEmailSender()


@pytest.fixture(autouse=True)
def throttling_off():
    limiter.enabled = False
    yield


@pytest.fixture
def rate_limiting(throttling_off):
    """Switch throttling on for a single test"""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


@pytest_asyncio.fixture
async def client(db_session, outbox):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_email_sender] = lambda: outbox

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def signed_up(client, test_data):
    """Registers a user from test data and returns (token, user_id, credentials)"""

    async def _signup(key: str = "alice"):
        user = test_data.get_copy("users")[key]
        response = await client.post("/api/auth/signup", json=user)
        assert response.status_code == 201
        data = response.json()
        return data["token"], data["user"]["id"], user

    return _signup
