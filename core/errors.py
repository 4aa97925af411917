"""
core/errors.py -- Error kinds raised by handlers and collaborators.

Every error carries the HTTP status and machine-readable code it maps to, so
api/main.py can render all of them through one exception handler into the
standard {"error": {...}} envelope. Nothing below knows about FastAPI.

Layer rule: core/ is the kernel. No imports from api/, auth/, or social/.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class. Subclasses pin status_code and the default code."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, code: str | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.detail = detail


class ValidationError(AppError):
    """Malformed input, rejected before the store is touched."""

    status_code = 400
    code = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class UnauthorizedError(AppError):
    """Missing or invalid credentials (token or password)."""

    status_code = 401
    code = "unauthorized"


class ForbiddenError(AppError):
    """Valid identity that does not own the resource it tries to mutate."""

    status_code = 403
    code = "forbidden"


class ConflictError(AppError):
    """Duplicate unique value, such as a registered email. Served as 400."""

    status_code = 400
    code = "conflict"


class InternalError(AppError):
    """Store, hasher or signer failure. The message is safe to show clients."""

    status_code = 500
    code = "internal_error"
