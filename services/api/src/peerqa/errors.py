"""Domain exceptions.

Every error carries the HTTP status it maps to; the global handlers in
``peerqa.middleware.error_handler`` render them as ``{"detail": message}``.
"""

from __future__ import annotations


class PeerQAError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PeerQAError):
    """Malformed or missing input. Nothing was mutated."""

    status_code = 400


class UnauthorizedError(PeerQAError):
    """Caller may not act on this resource."""

    status_code = 401


class NotFoundError(PeerQAError):
    """Referenced user, review, comment, achievement or badge does not exist."""

    status_code = 404


class ConflictError(PeerQAError):
    """A unique constraint (email, username, badge or achievement name) was violated."""

    status_code = 409


class PersistenceError(PeerQAError):
    """The store could not read or commit. Never retried here."""

    status_code = 500


class CatalogUnavailableError(PersistenceError):
    """The achievement catalog could not be loaded."""
