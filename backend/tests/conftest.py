"""
Koalab Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the whole suite.
How:   Each test gets its own SQLite database and secret file under tmp_path,
       a stubbed identity verifier (httpx.MockTransport) and, for endpoint
       tests, an httpx AsyncClient wired to the app through ASGITransport
       with the lifespan entered explicitly.

Fixture Hierarchy (all function-scoped):
    test_settings ── engine ── db_session
         │
         └── app (lifespan running, verifier stubbed) ── client ── auth_client
    verifier_stub
    mock_db_session
"""

import dataclasses
import os
import tempfile
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep the module-level default settings away from real services
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./koalab_test.db")
os.environ.setdefault("SECRET_FILE", os.path.join(tempfile.mkdtemp(prefix="koalab_test_"), ".secret"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from koalab.config import Settings  # noqa: E402
from koalab.database import build_engine, build_session_factory, create_schema  # noqa: E402
from koalab.main import create_app  # noqa: E402
from koalab.services.identity_verifier import IdentityVerifier  # noqa: E402

TEST_EMAIL = "a@b.com"
PUBLIC_URL = "http://koalab.test"


# ══════════════════════════════════════════════════════════════════════════
# Settings and store
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file and secret file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'koalab.db'}",
        secret_file=str(tmp_path / ".secret"),
        public_url=PUBLIC_URL,
        verifier_url="https://verifier.test/verify",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(test_settings):
    """Async engine with the schema created."""
    engine = build_engine(test_settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """A real AsyncSession on the test database."""
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for failure injection.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Identity verifier stub
# ══════════════════════════════════════════════════════════════════════════

class VerifierStub:
    """
    Plays the remote verifier behind an httpx.MockTransport.

    Attributes:
        reply:   JSON document (dict) or raw body (bytes) to answer with
        error:   exception to raise instead of answering (network failure)
        requests: every request received, for asserting on the form body
    """

    def __init__(self):
        self.reply: Any = {
            "status": "okay",
            "email": TEST_EMAIL,
            "audience": PUBLIC_URL,
            "issuer": "login.persona.org",
            "expires": 1700000000000,
        }
        self.status_code = 200
        self.error: Optional[Exception] = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, bytes):
            return httpx.Response(self.status_code, content=self.reply)
        return httpx.Response(self.status_code, json=self.reply)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def verifier_stub() -> VerifierStub:
    return VerifierStub()


# ══════════════════════════════════════════════════════════════════════════
# Application and HTTP clients
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings, verifier_stub):
    """
    Application with its lifespan running.

    The verifier built at startup is swapped for one talking to the stub.
    """
    application = create_app(test_settings)
    async with application.router.lifespan_context(application):
        context = application.state.context
        await context.verifier.aclose()
        application.state.context = dataclasses.replace(
            context,
            verifier=IdentityVerifier(
                verifier_url=test_settings.verifier_url,
                audience=test_settings.public_url,
                client=verifier_stub.client(),
            ),
        )
        yield application


@pytest_asyncio.fixture
async def client(app):
    """Anonymous HTTP client (no session cookie)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=PUBLIC_URL) as client:
        yield client


@pytest.fixture
def session_token(app) -> str:
    """A valid session cookie value for TEST_EMAIL."""
    context = app.state.context
    return context.codec.encode(context.settings.session_cookie_name, TEST_EMAIL)


@pytest_asyncio.fixture
async def auth_client(app, session_token):
    """HTTP client sending a valid session cookie on every request."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url=PUBLIC_URL,
        headers={"Cookie": f"email={session_token}"},
    ) as client:
        yield client
