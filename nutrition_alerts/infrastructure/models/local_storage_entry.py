"""SQLAlchemy model for the client-scoped key/value cache."""

from sqlalchemy import Column, DateTime, String, Text

from nutrition_alerts.infrastructure.database import Base
from nutrition_alerts.utils import now_in_app_naive_datetime


class LocalStorageEntryModel(Base):
    """One opaque string value stored under ``(namespace, key)``."""

    __tablename__ = "local_storage_entry"

    namespace = Column(String(64), primary_key=True)
    key = Column(String(120), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["LocalStorageEntryModel"]
