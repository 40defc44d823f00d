"""Rendering of tenancy errors for each transport.

The same domain error surfaces as an HTTP status code to web clients and
as an error payload to RPC/event consumers.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from tenancy.ports.exceptions import (
    MissingTenantConfigError,
    MissingTenantIdentifierError,
    TenancyError,
    TenantConnectionError,
    TenantValidationError,
)


class RpcError(Exception):
    """Error returned to an RPC or event caller.

    ``error`` is the payload sent back to the caller.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def error(self) -> dict[str, Any]:
        return {"status": "error", "message": self.message}


def to_http_exception(error: TenancyError) -> HTTPException:
    """Map a tenancy error to the HTTP error returned to the client.

    Returns:
        400 for missing configuration or identifier, 403 for a rejected
        tenant, 503 for an unavailable connection, 500 otherwise. A
        validator that raised an HTTPException gets it back unchanged.
    """
    match error:
        case MissingTenantConfigError() | MissingTenantIdentifierError():
            return HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(error),
            )
        case TenantValidationError(error=HTTPException() as original):
            return original
        case TenantValidationError():
            return HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(error),
            )
        case TenantConnectionError():
            return HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=str(error),
            )
        case _:
            return HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(error),
            )


def to_rpc_error(error: TenancyError) -> RpcError:
    """Map a tenancy error to the error payload of an RPC or event caller."""
    if isinstance(error, TenantValidationError) and isinstance(
        error.error, HTTPException
    ):
        return RpcError(str(error.error.detail))
    return RpcError(str(error))
