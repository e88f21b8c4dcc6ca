from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by domain services."""


class ValidationError(DomainError):
    pass


class StorageError(DomainError):
    """The task database could not complete an operation."""
