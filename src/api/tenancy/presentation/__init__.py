"""Tenancy presentation layer: transport specific error rendering and
tenant resolution for messages."""

from tenancy.presentation.errors import RpcError, to_http_exception, to_rpc_error
from tenancy.presentation.messaging import (
    resolve_event_connection,
    resolve_message_connection,
)

__all__ = [
    "RpcError",
    "resolve_event_connection",
    "resolve_message_connection",
    "to_http_exception",
    "to_rpc_error",
]
