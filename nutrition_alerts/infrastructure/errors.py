"""Errors raised by the infrastructure layer."""

from __future__ import annotations


class StoreReadError(RuntimeError):
    """A read against a remote collaborator failed or could not be issued."""


class LocalStorageError(RuntimeError):
    """The local key/value cache could not be read or written."""


__all__ = ["LocalStorageError", "StoreReadError"]
