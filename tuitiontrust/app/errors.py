from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class TuitionTrustError(Exception):
    status_code = 500

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(TuitionTrustError):
    """A required setting is absent or malformed."""


class UpstreamConnectivityError(TuitionTrustError):
    """The ledger node or the database could not be reached."""


class LedgerRequestError(TuitionTrustError):
    """The ledger node answered, but with an error result."""


class UnparsableAmount(TuitionTrustError, ValueError):
    """A delivered amount matches neither the native nor the issued shape."""


class AuthorizationError(TuitionTrustError):
    status_code = 401


class FeatureDisabledError(TuitionTrustError):
    status_code = 403


class InvalidRequestError(TuitionTrustError):
    status_code = 400


class ConflictError(TuitionTrustError):
    status_code = 409


def error_payload(exc: TuitionTrustError) -> dict:
    payload: dict[str, Any] = {"error": exc.message}
    if exc.details is not None:
        payload["details"] = exc.details
    return payload


async def _handle_tuitiontrust_error(request: Request, exc: TuitionTrustError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s raised", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error.", "details": str(exc)})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TuitionTrustError, _handle_tuitiontrust_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)
