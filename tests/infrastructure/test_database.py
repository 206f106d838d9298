"""Database layer: SQLAlchemy failures map to DATABASE_ERROR and roll back."""

import pytest
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)

from guildhall.core.errors import DatabaseError
from guildhall.infrastructure.database import DatabaseSessionManager, map_database_error


@pytest.mark.parametrize(
    "error, operation",
    [
        (IntegrityError("INSERT", {}, Exception("unique")), "commit"),
        (OperationalError("SELECT 1", {}, Exception("gone away")), "execute"),
        (DBAPIError("SELECT 1", {}, Exception("driver")), "query"),
        (SQLAlchemyError("mapper misconfigured"), "unknown"),
    ],
)
def test_map_database_error(error, operation):
    mapped = map_database_error(error)
    assert isinstance(mapped, DatabaseError)
    assert mapped.code == "DATABASE_ERROR"
    assert mapped.operation == operation
    assert mapped.http_status == 503


def test_mapped_message_hides_driver_details():
    mapped = map_database_error(
        OperationalError("SELECT 1", {}, Exception("password=hunter2")),
    )
    assert "hunter2" not in mapped.message


async def test_session_rolls_back_and_maps_errors():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    try:
        with pytest.raises(DatabaseError) as exc_info:
            async with manager.session():
                raise OperationalError("SELECT 1", {}, Exception("gone away"))
        assert isinstance(exc_info.value.__cause__, OperationalError)
    finally:
        await manager.dispose()
