import asyncio
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from landscape.domain.quotes import db_models as quote_db_models  # noqa: F401
from landscape.infra.communication import CommunicationResult
from landscape.infra.db import Base, get_db_session
from landscape.main import app
from landscape.settings import settings

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "secret"


class FakeSmsAdapter:
    def __init__(self, result: CommunicationResult | None = None) -> None:
        self.sent: list[dict[str, str]] = []
        self.result = result or CommunicationResult(status="sent", provider_msg_id="SM-test")

    async def send_sms(self, *, to_number: str, body: str) -> CommunicationResult:
        self.sent.append({"to_number": to_number, "body": body})
        return self.result


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def test_engine():
    db_path = Path("test.db")
    if db_path.exists():
        db_path.unlink()
    engine = create_async_engine(
        "sqlite+aiosqlite:///./test.db",
        connect_args={"check_same_thread": False, "timeout": 30},
        poolclass=StaticPool,
    )

    async def init_models() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture(scope="session")
def async_session_maker(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture(autouse=True)
def restore_settings():
    original = {
        "admin_basic_username": settings.admin_basic_username,
        "admin_basic_password": settings.admin_basic_password,
        "admin_notification_phone": settings.admin_notification_phone,
        "sms_mode": settings.sms_mode,
        "twilio_account_sid": settings.twilio_account_sid,
        "twilio_auth_token": settings.twilio_auth_token,
        "twilio_sms_from": settings.twilio_sms_from,
        "metrics_enabled": settings.metrics_enabled,
        "testing": settings.testing,
        "app_env": settings.app_env,
    }
    yield
    for key, value in original.items():
        setattr(settings, key, value)


@pytest.fixture(autouse=True)
def enable_test_mode():
    settings.testing = True
    settings.app_env = "dev"
    settings.admin_basic_username = ADMIN_USERNAME
    settings.admin_basic_password = ADMIN_PASSWORD
    settings.admin_notification_phone = "+16025550100"
    yield


@pytest.fixture(autouse=True)
def clean_database(test_engine):
    async def truncate_tables() -> None:
        async with test_engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                await conn.execute(table.delete())

    asyncio.run(truncate_tables())
    yield


@pytest.fixture()
def sms_adapter():
    return FakeSmsAdapter()


def _build_client(async_session_maker, sms_adapter, *, raise_server_exceptions: bool):
    async def override_db_session():
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    original_factory = getattr(app.state, "db_session_factory", None)
    original_adapter = getattr(app.state, "communication_adapter", None)
    app.state.db_session_factory = async_session_maker
    app.state.communication_adapter = sms_adapter
    try:
        with TestClient(app, raise_server_exceptions=raise_server_exceptions) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
        app.state.db_session_factory = original_factory
        app.state.communication_adapter = original_adapter


@pytest.fixture()
def client(async_session_maker, sms_adapter):
    yield from _build_client(async_session_maker, sms_adapter, raise_server_exceptions=True)


@pytest.fixture()
def client_no_raise(async_session_maker, sms_adapter):
    """Test client that returns HTTP responses instead of raising server exceptions."""
    yield from _build_client(async_session_maker, sms_adapter, raise_server_exceptions=False)
