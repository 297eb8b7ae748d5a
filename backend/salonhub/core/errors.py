"""
salonhub/core/errors.py
Error kinds of the callable functions and their wire envelope.

A failing callable answers with the Firebase callable error body:

    {"error": {"status": "PERMISSION_DENIED", "message": "...", "details": ...}}
"""
import logging
from enum import Enum
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("salonhub.errors")


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission-denied"
    INVALID_ARGUMENT = "invalid-argument"
    NOT_FOUND = "not-found"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def wire_status(self) -> str:
        """Canonical status name, e.g. ``PERMISSION_DENIED``."""
        return self.value.replace("-", "_").upper()

    @classmethod
    def from_wire(cls, value: str) -> "ErrorCode":
        normalized = (value or "").lower().replace("_", "-")
        for code in cls:
            if code.value == normalized:
                return code
        return cls.INTERNAL


_HTTP_STATUS = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class CallableError(Exception):
    """Failure of a callable function, carrying its error kind."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def to_wire(self) -> dict:
        body = {"status": self.code.wire_status, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return {"error": body}

    def __repr__(self) -> str:
        return f"CallableError({self.code.value!r}, {self.message!r})"


async def callable_error_handler(request: Request, exc: CallableError) -> JSONResponse:
    if exc.code is ErrorCode.INTERNAL:
        logger.error("%s %s -> internal: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.code.http_status, content=exc.to_wire())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed callable payloads are reported as invalid-argument."""
    err = CallableError(
        ErrorCode.INVALID_ARGUMENT,
        "Invalid request payload.",
        details=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()],
    )
    return JSONResponse(status_code=err.code.http_status, content=err.to_wire())
