"""Tenant resolution for RPC messages and events.

Message handlers call these helpers with the raw payload they received.
Tenancy failures come back as ``RpcError`` so the messaging layer can
reply with an error payload instead of crashing the consumer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tenancy.application.services import TenancyService
from tenancy.domain.value_objects import (
    EventRequestContext,
    RequestContext,
    RpcRequestContext,
)
from tenancy.ports.connections import ITenantConnection
from tenancy.ports.exceptions import TenancyError
from tenancy.presentation.errors import to_rpc_error


async def resolve_message_connection(
    service: TenancyService,
    pattern: Any,
    data: Mapping[str, Any] | None,
) -> ITenantConnection:
    """Resolve the tenant connection for an RPC message.

    Raises:
        RpcError: If the tenant cannot be resolved.
    """
    return await _resolve(service, RpcRequestContext(pattern=pattern, data=data or {}))


async def resolve_event_connection(
    service: TenancyService,
    payload: Mapping[str, Any] | None,
) -> ITenantConnection:
    """Resolve the tenant connection for an event or websocket message.

    Raises:
        RpcError: If the tenant cannot be resolved.
    """
    return await _resolve(service, EventRequestContext(payload=payload or {}))


async def _resolve(
    service: TenancyService,
    context: RequestContext,
) -> ITenantConnection:
    try:
        return await service.resolve(context)
    except TenancyError as e:
        raise to_rpc_error(e) from e
