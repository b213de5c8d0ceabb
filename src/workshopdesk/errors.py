from __future__ import annotations


class WorkshopError(Exception):
    pass


class ValidationError(WorkshopError):
    """Caller input violates a precondition. Raised before anything is written."""


class NotFoundError(ValidationError):
    pass


class DependencyError(WorkshopError):
    """The data store rejected a read or write."""
