"""Database Session Manager — async connection pool, unit of work, and error mapping.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - unit_of_work commits exactly once on success and rolls back on every other exit path
    - Unique violations map to DuplicateIdentifierError, serialization failures and
      deadlocks to TransactionConflictError, everything else to DatabaseError
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Session handle is passed explicitly to every engine operation; db_manager only
      exists so the FastAPI dependency and readiness probe can open sessions
    - expire_on_commit=False: snapshots built after commit need no lazy reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from swinetrack.core.errors import (
    DatabaseError,
    DuplicateIdentifierError,
    ErrorContext,
    SwineTrackError,
    TransactionConflictError,
)
from swinetrack.db.session import session_factory_for

logger = logging.getLogger(__name__)

# SQLSTATE codes: serialization_failure, deadlock_detected, unique_violation
_CONFLICT_SQLSTATES = {"40001", "40P01"}
_UNIQUE_VIOLATION = "23505"


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def map_database_error(exc: SQLAlchemyError, operation: str) -> SwineTrackError:
    """Translate a SQLAlchemy exception into the SwineTrack error hierarchy."""
    context = ErrorContext(operation=operation, debug_info={"driver_error": str(exc)})
    if isinstance(exc, DBAPIError):
        state = _sqlstate(exc)
        detail = str(exc.orig)
        if state in _CONFLICT_SQLSTATES or "database is locked" in detail:
            return TransactionConflictError(
                "Concurrent update conflict, retry the command", context,
            )
        if isinstance(exc, IntegrityError):
            if state == _UNIQUE_VIOLATION or "UNIQUE constraint failed" in detail:
                return DuplicateIdentifierError("identifier", detail, context)
            return DatabaseError("Integrity constraint violated", operation, context)
        if isinstance(exc, OperationalError):
            return DatabaseError("Connection or operational error", operation, context)
        return DatabaseError("Database driver error", operation, context)
    return DatabaseError("Database operation failed", operation, context)


@asynccontextmanager
async def unit_of_work(
    db: AsyncSession, operation: str,
) -> AsyncGenerator[AsyncSession, None]:
    """One command, one transaction: commit on success, full rollback otherwise."""
    try:
        yield db
        await db.commit()
    except SwineTrackError as e:
        await db.rollback()
        logger.warning(
            f"{operation} rejected: {e.message}",
            extra={"operation": operation, "error_code": e.code},
        )
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        mapped = map_database_error(e, operation)
        logger.error(
            f"{operation} failed in store: {e}",
            extra={"operation": operation, "error_code": mapped.code},
        )
        raise mapped from e
    except Exception:
        await db.rollback()
        raise


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = session_factory_for(self.engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"DB error: {e}")
            raise map_database_error(e, "session") from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Initialized on startup by the application lifespan
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
