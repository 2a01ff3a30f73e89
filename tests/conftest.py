"""Shared fixtures: in-memory SQLite, temporary upload storage and an ASGI client.

Every test gets a fresh database. Dependencies that touch the outside world
(storage directory, outgoing mail) are overridden on the FastAPI app.
"""

import os
from typing import AsyncGenerator, Callable

# Set test configuration before importing the app
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["DEPLOY_PHASE"] = "test"
os.environ["SMTP_HOST"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import valkyrie.models  # noqa: F401
from valkyrie.database import get_session
from valkyrie.main import app
from valkyrie.services import AuthService, MailService, UserService
from valkyrie.utils.dependencies import get_auth_service, get_user_service
from valkyrie.utils.storage import LocalStorage

FILES_BASE_URL = "http://testserver/files"


class RecordingMailService(MailService):
    """Keeps reset mails in memory instead of sending them."""

    def __init__(self):
        self.reset_mails: list[tuple[str, str]] = []

    async def send_reset_password(self, to: str, token: str) -> None:
        self.reset_mails.append((to, token))


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(root=tmp_path / "files", base_url=FILES_BASE_URL)


@pytest.fixture
def mail() -> RecordingMailService:
    return RecordingMailService()


@pytest_asyncio.fixture
async def test_app(session_factory, storage, mail):
    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_user_service] = lambda: UserService(storage=storage)
    app.dependency_overrides[get_auth_service] = lambda: AuthService(mail_service=mail)

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_client(test_app) -> AsyncGenerator[Callable[[], AsyncClient], None]:
    """Factory for independent clients (separate cookie jars) on the same app."""
    clients: list[AsyncClient] = []

    def _make() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=test_app), base_url="http://testserver")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def client(make_client) -> AsyncClient:
    return make_client()


async def register(
    client: AsyncClient,
    email: str = "valkyrie@example.com",
    username: str = "valkyrie",
    password: str = "password",
) -> dict:
    response = await client.post(
        "/account/register",
        json={"email": email, "username": username, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def user(client) -> dict:
    """A registered, logged in user on `client`."""
    return await register(client)


@pytest.fixture
def register_user():
    return register
