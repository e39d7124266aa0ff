from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    String,
    Text,
    BigInteger,
    func,
    select,
)
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import OperationalError
import asyncio
import time
import uuid
import os
import logging
from typing import Any, Dict

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_FOLDER_ID = "default-my-notes"
DEFAULT_FOLDER_NAME = "My Notes"

# Async engine configuration
if settings.enable_database:
    engine = create_async_engine(
        settings.database_url,
        echo=False,  # Set to True for SQL debugging
        future=True,
    )

    # Session factory
    AsyncSessionLocal = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
else:
    engine = None
    AsyncSessionLocal = None
    logger.warning("Database disabled via ENABLE_DATABASE=0; skipping engine creation")


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


Base = declarative_base()


# Database Models
class Folder(Base):
    __tablename__ = "folders"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    is_open = Column(Boolean, nullable=False, default=True)
    created_at = Column(BigInteger, nullable=False, default=now_ms, index=True)
    updated_at = Column(BigInteger, nullable=False, default=now_ms, onupdate=now_ms)


class Note(Base):
    __tablename__ = "notes"

    id = Column(String, primary_key=True, default=new_id)
    folder_id = Column(
        String, ForeignKey("folders.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String, nullable=False, default="Untitled")
    content = Column(Text, nullable=False, default="")
    created_at = Column(BigInteger, nullable=False, default=now_ms, index=True)
    updated_at = Column(BigInteger, nullable=False, default=now_ms, onupdate=now_ms)

    __table_args__ = (
        Index("ix_notes_folder_updated", folder_id, updated_at.desc()),
    )


# Dependency for FastAPI
async def get_db():
    """Database session dependency for FastAPI endpoints"""
    if not settings.enable_database or AsyncSessionLocal is None:
        raise RuntimeError("Database access requested but ENABLE_DATABASE=0")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def seed_default_folder(session: AsyncSession) -> bool:
    """Create the "My Notes" folder when no folder exists yet."""
    folder_count = await session.scalar(select(func.count()).select_from(Folder))
    if folder_count:
        return False

    stamp = now_ms()
    session.add(
        Folder(
            id=DEFAULT_FOLDER_ID,
            name=DEFAULT_FOLDER_NAME,
            is_open=True,
            created_at=stamp,
            updated_at=stamp,
        )
    )
    await session.commit()
    logger.info("Seeded default folder %s", DEFAULT_FOLDER_ID)
    return True


# Initialize database tables
async def init_db():
    """Create all tables if they don't exist and seed the default folder"""
    if not settings.enable_database or engine is None:
        logger.info("Skipping database initialization; ENABLE_DATABASE=0")
        return

    def _is_transient_startup_error(exc: BaseException) -> bool:
        if isinstance(exc, OperationalError):
            return True
        message = str(exc).lower()
        return "connection refused" in message or "could not connect" in message

    timeout_seconds = float(os.getenv("DB_STARTUP_TIMEOUT_SECONDS", "60"))
    deadline = time.monotonic() + timeout_seconds
    delay_seconds = 0.25
    attempt = 0

    while True:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables initialized successfully")
            break
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not _is_transient_startup_error(exc) or time.monotonic() >= deadline:
                logger.error("Failed to initialize database: %s", exc, exc_info=True)
                raise

            attempt += 1
            logger.warning(
                "Database not ready yet (attempt %d). Retrying in %.2fs: %s",
                attempt,
                delay_seconds,
                exc,
            )
            await asyncio.sleep(delay_seconds)
            delay_seconds = min(delay_seconds * 1.5, 5.0)

    async with AsyncSessionLocal() as session:
        await seed_default_folder(session)


def folder_record_to_dict(record: Folder) -> Dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "isOpen": bool(record.is_open),
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }


def note_record_to_dict(record: Note) -> Dict[str, Any]:
    return {
        "id": record.id,
        "folderId": record.folder_id,
        "title": record.title,
        "content": record.content,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }
