"""Domain exceptions and their HTTP rendering.

Every failure the platform reports on purpose is a ``QuillhubError``. Client
errors carry a stable ``reason`` string next to the human message so callers
can branch on it; internal errors are logged and answered with an opaque 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class QuillhubError(Exception):
    """Base class for every error rendered by the API."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    reason: str = "bad_request"
    internal: bool = False
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ── Tenant resolution ─────────────────────────────────────────

class TenantContextRequired(QuillhubError):
    reason = "tenant_context_required"
    default_message = "Tenant context required (x-tenant-id header)"


class TenantNotFound(QuillhubError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "tenant_not_found"
    default_message = "Tenant not found"


class TenantInactive(QuillhubError):
    status_code = status.HTTP_403_FORBIDDEN
    reason = "tenant_inactive"
    default_message = "Tenant is not active"


class InvalidTenantDatabaseName(QuillhubError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason = "internal_error"
    internal = True
    default_message = "Invalid tenant database name"


# ── Authentication ────────────────────────────────────────────

class InvalidCredential(QuillhubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "invalid_credential"
    default_message = "Invalid or expired credential"


class PrincipalNotFound(QuillhubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "principal_not_found"
    default_message = "User not found or inactive"


class InvalidLogin(QuillhubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "invalid_login"
    default_message = "Invalid credentials"


class EmailTaken(QuillhubError):
    status_code = status.HTTP_409_CONFLICT
    reason = "email_taken"
    default_message = "Email already exists"


class UsernameTaken(QuillhubError):
    status_code = status.HTTP_409_CONFLICT
    reason = "username_taken"
    default_message = "Username already exists"


# ── Tenant lifecycle ──────────────────────────────────────────

class SlugTaken(QuillhubError):
    status_code = status.HTTP_409_CONFLICT
    reason = "slug_taken"
    default_message = "Tenant slug already taken"


class SlugReserved(QuillhubError):
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    reason = "slug_reserved"
    default_message = "Tenant slug is reserved"


class OwnerNotFound(QuillhubError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "owner_not_found"
    default_message = "Owner user not found"


class NotAuthorized(QuillhubError):
    status_code = status.HTTP_403_FORBIDDEN
    reason = "not_authorized"
    default_message = "Not authorized to modify this tenant"


# ── Handlers ──────────────────────────────────────────────────

_OPAQUE = {"detail": "Internal server error"}


async def quillhub_error_handler(request: Request, exc: QuillhubError) -> JSONResponse:
    if exc.internal:
        logger.error(
            "Internal error on %s %s: %s", request.method, request.url.path, exc.message,
            exc_info=exc,
        )
        return JSONResponse(status_code=exc.status_code, content=_OPAQUE)

    logger.info(
        "%s %s rejected: %s (%s)", request.method, request.url.path, exc.reason, exc.message
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "reason": exc.reason},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_OPAQUE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuillhubError, quillhub_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
