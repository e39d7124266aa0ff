"""
Shared fixtures for the notes API tests.

Provides an in-memory SQLite database seeded with the default folder, a
stubbed inference SDK client, and an AsyncClient wired to the real FastAPI
app with both injected through dependency overrides.
"""

import os

# Keep test runs from writing JSONL call logs
os.environ.setdefault("ENABLE_LLM_CALL_LOG", "0")

from typing import AsyncGenerator, List, Optional  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.llm_client import InferenceClient, get_inference_client  # noqa: E402
from app.database import Base, get_db, seed_default_folder  # noqa: E402


# ---------------------------------------------------------------------------
# Stub inference SDK
# ---------------------------------------------------------------------------


def make_completion(content: Optional[str]) -> MagicMock:
    """Build a fake chat completion whose first choice carries ``content``."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    choice.finish_reason = "stop"
    response = MagicMock()
    response.choices = [choice]
    return response


class StubInference:
    """Controls what the mocked SDK returns and records what it was sent."""

    def __init__(self):
        self.sdk = MagicMock()
        self.sdk.chat.completions.create.return_value = make_completion("")
        self.client = InferenceClient(self.sdk)

    def reply(self, content: Optional[str]) -> None:
        self.sdk.chat.completions.create.side_effect = None
        self.sdk.chat.completions.create.return_value = make_completion(content)

    def fail(self, exc: Exception) -> None:
        self.sdk.chat.completions.create.side_effect = exc

    @property
    def calls(self) -> List:
        return self.sdk.chat.completions.create.call_args_list

    @property
    def last_kwargs(self) -> dict:
        return self.sdk.chat.completions.create.call_args.kwargs


@pytest.fixture
def inference() -> StubInference:
    return StubInference()


# ---------------------------------------------------------------------------
# In-memory async SQLite engine
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        await seed_default_folder(session)
        yield session


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(db_engine, db_session, inference) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient hitting the real FastAPI app but with:
    - get_db overridden to use the in-memory SQLite session
    - get_inference_client overridden to return the stubbed SDK client
    """
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    from app.main import app

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_inference_client] = lambda: inference.client

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
