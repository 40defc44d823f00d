"""Tenant identifier extraction from inbound call contexts.

One extraction function per context kind, selected by the context's
``kind`` discriminant:

- HTTP: the last label of the reversed, port-less host (subdomain mode) or
  a case-insensitive header lookup (header mode)
- RPC: a field of the message payload
- Event/websocket: a field of the raw payload

Extraction is a pure function of the context and the options.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tenancy.domain.value_objects import (
    ContextKind,
    EventRequestContext,
    HttpRequestContext,
    RequestContext,
    RpcRequestContext,
    TenantId,
)
from tenancy.ports.exceptions import (
    MissingTenantConfigError,
    MissingTenantIdentifierError,
)
from tenancy.ports.options import TenancyModuleOptions


def extract_tenant_id(
    context: RequestContext,
    options: TenancyModuleOptions,
) -> TenantId:
    """Extract the tenant identifier for an inbound call.

    Args:
        context: Normalized HTTP, RPC or event context
        options: Tenancy options selecting the extraction strategy

    Returns:
        The tenant identifier.

    Raises:
        MissingTenantConfigError: If no identifier source is configured.
        MissingTenantIdentifierError: If the configured source is absent or empty.
    """
    if not options.has_identifier_source:
        raise MissingTenantConfigError(
            "Tenant identifier is mandatory", kind=context.kind
        )

    match context.kind:
        case ContextKind.HTTP:
            return _extract_from_http(context, options)  # type: ignore[arg-type]
        case ContextKind.RPC:
            return _extract_from_rpc(context, options)  # type: ignore[arg-type]
        case ContextKind.EVENT:
            return _extract_from_event(context, options)  # type: ignore[arg-type]
        case _:
            raise MissingTenantConfigError(
                f"Unsupported context kind: {context.kind!r}"
            )


def subdomains_of(host: str) -> list[str]:
    """Split a host into labels, most significant first.

    ``"acme.app.example.com:443"`` gives ``["com", "example", "app", "acme"]``.
    """
    hostname = host.split(":")[0].strip()
    return hostname.split(".")[::-1]


def _extract_from_http(
    context: HttpRequestContext,
    options: TenancyModuleOptions,
) -> TenantId:
    if options.is_tenant_from_subdomain:
        labels = subdomains_of(context.effective_host)
        value = labels[-1] if labels else None
        if _is_empty(value):
            raise MissingTenantIdentifierError(
                "Tenant ID is mandatory", kind=ContextKind.HTTP
            )
        return TenantId.from_string(str(value))

    identifier = options.tenant_identifier or ""
    return _to_tenant_id(context.header(identifier), identifier, ContextKind.HTTP)


def _extract_from_rpc(
    context: RpcRequestContext,
    options: TenancyModuleOptions,
) -> TenantId:
    identifier = _require_field_identifier(options, ContextKind.RPC)
    return _to_tenant_id(context.data.get(identifier), identifier, ContextKind.RPC)


def _extract_from_event(
    context: EventRequestContext,
    options: TenancyModuleOptions,
) -> TenantId:
    identifier = _require_field_identifier(options, ContextKind.EVENT)
    return _to_tenant_id(
        context.payload.get(identifier), identifier, ContextKind.EVENT
    )


def _require_field_identifier(
    options: TenancyModuleOptions,
    kind: ContextKind,
) -> str:
    # Subdomain mode has no meaning for messages
    if not options.tenant_identifier:
        raise MissingTenantConfigError("Tenant identifier is mandatory", kind=kind)
    return options.tenant_identifier


def _to_tenant_id(value: Any, identifier: str, kind: ContextKind) -> TenantId:
    if _is_empty(value) or not isinstance(value, (str, int)) or isinstance(value, bool):
        raise MissingTenantIdentifierError(
            f"{identifier} is not supplied", kind=kind, identifier=identifier
        )
    return TenantId.from_string(str(value))


def _is_empty(value: Any) -> bool:
    """Check whether a value carries no identifier.

    None, blank strings, empty collections and mappings without a single
    defined value all count as empty.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Mapping):
        return all(v is None for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False
