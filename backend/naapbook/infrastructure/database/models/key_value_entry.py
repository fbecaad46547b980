"""SQLAlchemy ORM model for namespaced key-value blobs."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from naapbook.infrastructure.database.base import Base


class KeyValueEntryModel(Base):
    """ORM model, maps to the 'key_value_entries' table."""

    __tablename__ = "key_value_entries"

    namespace: Mapped[str] = mapped_column(String(100), primary_key=True)
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntryModel(namespace='{self.namespace}', key='{self.key}')>"
