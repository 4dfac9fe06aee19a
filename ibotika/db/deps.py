# ibotika/db/deps.py
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator
from common import request_timer_context_var

from .db_manager import DbManager


def get_db_manager(request: Request) -> DbManager:
    """
    Pull the manager created during lifespan from app.state.

    No import from main.py here, so several app instances (and tests)
    can each carry their own manager.
    """
    manager = getattr(request.app.state, "db_manager", None)
    if manager is None:
        raise RuntimeError(
            "DbManager not found in app.state. Ensure lifespan is configured."
        )
    return manager


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    One transactional session per request; commit on success, rollback on error.
    Session lifetime is recorded as ``db`` in the request timer.
    """
    manager = get_db_manager(request)
    timer = request_timer_context_var.get()

    if timer is None:
        async with manager.session() as session:
            yield session
        return

    with timer.capture("db"):
        async with manager.session() as session:
            yield session


__all__ = ["get_db", "get_db_manager"]
