# subsapi/errors.py
from __future__ import annotations


class AppError(Exception):
    """Base for every failure the API knows how to report."""

    code = "error"
    status_code = 500

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    def default_detail(self) -> str:
        return self.code.replace("_", " ")


# ---- client errors, never retried ----

class InvalidInput(AppError):
    code = "invalid_input"
    status_code = 400


class InvalidCredentials(InvalidInput):
    code = "invalid_credentials"


class PreconditionFailed(AppError):
    code = "precondition_failed"
    status_code = 400


class NotFound(AppError):
    code = "not_found"
    status_code = 404


class InvalidToken(AppError):
    code = "invalid_token"
    status_code = 401


# ---- server side ----

class PersistenceError(AppError):
    """Store failure that retrying will not fix (constraint violations and the like)."""

    code = "persistence_error"
    status_code = 500


class TransientPersistenceError(PersistenceError):
    """Connection drops, timeouts, pool exhaustion: safe to retry."""

    code = "transient_persistence_error"


class ServiceUnavailable(AppError):
    code = "service_unavailable"
    status_code = 500


class OperationCancelled(AppError):
    code = "cancelled"
    status_code = 499


class UnexpectedError(AppError):
    code = "internal_error"
    status_code = 500

    def default_detail(self) -> str:
        return "An unexpected error occurred."
