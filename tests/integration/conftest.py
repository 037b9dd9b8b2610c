import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_unit_of_work

STRONG_PASSWORD = "Tr0ub4dor&3xyz!"


class IntegrationConfig(ApplicationConfig):
    BCRYPT_ROUNDS = 4
    LOG_LEVEL = "WARNING"
    TRUSTED_PROXIES = ["127.0.0.1"]


@pytest.fixture
def admin_headers():
    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest.fixture
def app_config():
    return IntegrationConfig


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
def app(app_config):
    from src.api.app import create_app

    return create_app(app_config)


@pytest.fixture
def services(app):
    return app.state.security


@pytest_asyncio.fixture
async def client(app, services, db_session):
    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session, services.password_hasher)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def signup(client):
    async def _signup(email="learner@quizschool.com", password=STRONG_PASSWORD, **extra):
        response = await client.post("/auth/signup", json={"email": email, "password": password, **extra})
        assert response.status_code == 201, response.text
        return response.json()["user"]

    return _signup


@pytest.fixture
def login(client):
    async def _login(identifier="learner@quizschool.com", password=STRONG_PASSWORD, **extra):
        return await client.post(
            "/auth/login", json={"identifier": identifier, "password": password, **extra}
        )

    return _login
