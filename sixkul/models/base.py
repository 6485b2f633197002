from sqlalchemy.orm import as_declarative, declared_attr
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import DateTime, Boolean, Uuid
import uuid

from ..utils.dates import utcnow


@as_declarative()
class Base:
    __abstract__ = True  # Prevents creating a table for the base class

    id: Mapped[uuid.UUID]

    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    # Portable UUID: native uuid on PostgreSQL, CHAR(32) elsewhere
    id = mapped_column(Uuid, primary_key=True, index=True, default=uuid.uuid4)
    created_at = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Soft delete flag - indexed for performance
    is_deleted = mapped_column(Boolean, default=False, nullable=False, index=True)
