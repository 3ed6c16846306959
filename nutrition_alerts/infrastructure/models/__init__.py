"""ORM models used by the application infrastructure."""

from .local_storage_entry import LocalStorageEntryModel

__all__ = ["LocalStorageEntryModel"]
