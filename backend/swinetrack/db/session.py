"""Async Session Factory — sessions bound to an engine outside the FastAPI dependency.

Invariants:
    - expire_on_commit=False, matching DatabaseSessionManager: command snapshots
      are built after commit without reloading
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def session_factory_for(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to an existing engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
