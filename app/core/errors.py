"""Error taxonomy shared by services and endpoints.

Every error carries the HTTP status it maps to. Handlers registered in
``app.main`` render them as ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, error: str, details: str | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    """Actor is not the owner of the resource."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class UpstreamError(AppError):
    """Third-party API failure or missing credential."""

    status_code = 500


class StorageError(AppError):
    """Datastore or blob store failure."""

    status_code = 500


class PayloadTooLargeError(AppError):
    status_code = 413
