import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Annotated

from sqlalchemy import types
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass, mapped_column

from todo_api.types.exceptions import MissingTZInfoInDatetimeError


class TZDateTime(types.TypeDecorator):
    """
    Aware datetimes, stored as naive UTC datetimes.

    SQLite has no timezone support: values are converted to UTC when written
    and read back with the UTC timezone.
    See https://docs.sqlalchemy.org/en/20/core/custom_types.html#store-timezone-aware-timestamps-as-timezone-naive-utc
    """

    # Existing migrations reference this type, its storage format must not change
    impl = types.DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None or value.utcoffset() is None:
            raise MissingTZInfoInDatetimeError
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect):
        return None if value is None else value.replace(tzinfo=UTC)


# Todo identifiers, see https://docs.sqlalchemy.org/en/20/orm/declarative_tables.html#mapping-whole-column-declarations-to-python-types
PrimaryKey = Annotated[uuid.UUID, mapped_column(primary_key=True)]

SessionLocalType = Callable[[], AsyncSession]


class Base(MappedAsDataclass, DeclarativeBase):
    """
    Base class of the models. Models are dataclasses: every column without default is a required constructor argument.

    `datetime` annotations are mapped to `TZDateTime`, see https://docs.sqlalchemy.org/en/20/orm/declarative_tables.html#customizing-the-type-map
    """

    type_annotation_map = {
        datetime: TZDateTime(),
        uuid.UUID: types.Uuid(),
    }
