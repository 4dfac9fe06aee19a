# ibotika/db/models/db_base_model.py
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import DateTime
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class DbBaseModel(DeclarativeBase):
    __abstract__ = True  # prevents SQLAlchemy from creating a table for this base

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,  # refreshed by every UPDATE, ORM or bulk
        nullable=False,
    )


__all__ = ["DbBaseModel", "utc_now"]
