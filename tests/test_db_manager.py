import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError


async def test_failed_statement_does_not_leak_query_start(db_manager):
    async with db_manager.engine.connect() as conn:
        for _ in range(3):
            with pytest.raises(OperationalError):
                await conn.execute(text("SELECT * FROM no_such_table"))

        assert conn.sync_connection.info.get("query_start", []) == []

        await conn.execute(text("SELECT 1"))
        assert conn.sync_connection.info["query_start"] == []

    await db_manager.dispose()
