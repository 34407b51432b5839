"""Typed errors raised by the work order engine.

Each error carries the HTTP status the API layer answers with; see the
handler registered in ``workorders.main``.
"""

from __future__ import annotations

from typing import Any


class WorkOrderError(Exception):
    """Base class for every error the engine raises on purpose."""

    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def error_code(self) -> str:
        return self.__class__.__name__


class ValidationError(WorkOrderError):
    """Malformed or out-of-range input (negative quantity, blank signer name)."""

    status_code = 400


class AccessDenied(WorkOrderError):
    status_code = 403


class NotFound(WorkOrderError):
    status_code = 404


class DuplicateSignatureError(WorkOrderError):
    """A signature for this (work order, signer type) pair already exists."""

    status_code = 409


class ConflictError(WorkOrderError):
    """Unique-constraint violation that a retry could not resolve."""

    status_code = 409


class NumberGenerationFailed(WorkOrderError):
    """Every attempt to allocate a work order number collided."""

    status_code = 503
