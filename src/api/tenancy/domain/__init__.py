"""Domain layer for the Tenancy bounded context."""

from tenancy.domain.value_objects import (
    DEFAULT_DISCRIMINATOR_KEY,
    ContextKind,
    Discriminator,
    EventRequestContext,
    HttpRequestContext,
    ModelDefinition,
    RequestContext,
    RpcRequestContext,
    TenantId,
)

__all__ = [
    "DEFAULT_DISCRIMINATOR_KEY",
    "ContextKind",
    "Discriminator",
    "EventRequestContext",
    "HttpRequestContext",
    "ModelDefinition",
    "RequestContext",
    "RpcRequestContext",
    "TenantId",
]
