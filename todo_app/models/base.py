"""
Base configurations and mixins for database models.

Every model in the to-do list application derives from ``Base`` and usually
mixes in ``IntegerIdMixin`` and ``TimestampMixin``.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, inspect
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now

from todo_app.config import settings


class CustomBase:
    """
    Custom base class for SQLAlchemy models with ``to_dict`` serialization.

    Datetimes are rendered with ``isoformat()``.
    """

    def to_dict(self) -> dict:
        d = {}
        if not self:
            return d
        for column in inspect(self).mapper.column_attrs:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                d[column.key] = value.isoformat()
            else:
                d[column.key] = value
        return d


Base = declarative_base(cls=CustomBase)


class TimestampMixin:
    """
    Adds database-managed created_at / updated_at columns.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        onupdate=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class IntegerIdMixin:
    """
    Adds an autoincrement integer primary key.

    Integer ids are part of the public contract: access tokens carry the
    user id as a stringified integer.
    """

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        index=True,
        comment="Autoincrement primary key",
    )


SCHEMA_NAME = settings.schema_name


def qualified(column_path: str) -> str:
    """Prefix ``table.column`` with the application schema for ForeignKey targets."""
    return f"{SCHEMA_NAME}.{column_path}"


__all__ = ["Base", "TimestampMixin", "IntegerIdMixin", "SCHEMA_NAME", "qualified"]
