"""Domain exceptions for the Tenancy bounded context.

Extraction and validation errors are raised before any connection is
attempted. They record the kind of inbound call they were raised for; the
transport adapters render them as HTTP or RPC errors.
"""

from __future__ import annotations

from tenancy.domain.value_objects import ContextKind


class TenancyError(Exception):
    """Base exception for tenant resolution failures."""

    def __init__(self, message: str, kind: ContextKind | None = None):
        super().__init__(message)
        self.kind = kind


class MissingTenantConfigError(TenancyError):
    """Raised when no tenant identifier source is configured.

    Neither a header/field name nor subdomain extraction was set up, so
    no call can ever be routed to a tenant.
    """

    pass


class MissingTenantIdentifierError(TenancyError):
    """Raised when the configured identifier source is absent or empty."""

    def __init__(
        self,
        message: str,
        kind: ContextKind | None = None,
        identifier: str | None = None,
    ):
        super().__init__(message, kind)
        self.identifier = identifier


class TenantValidationError(TenancyError):
    """Raised when the configured validator rejects a tenant.

    The validator's own exception is kept in ``error`` (and as ``__cause__``).
    """

    def __init__(
        self,
        tenant_id: str,
        error: Exception,
        kind: ContextKind | None = None,
    ):
        super().__init__(f"Tenant '{tenant_id}' failed validation: {error}", kind)
        self.tenant_id = tenant_id
        self.error = error


class TenantConnectionError(TenancyError):
    """Raised when a tenant connection cannot be opened or provisioned.

    Nothing is cached for the tenant when this is raised.
    """

    def __init__(
        self,
        message: str,
        tenant_id: str,
        kind: ContextKind | None = None,
    ):
        super().__init__(message, kind)
        self.tenant_id = tenant_id


class TenantConnectionTimeoutError(TenantConnectionError):
    """Raised when opening a tenant connection exceeds its time budget."""

    def __init__(
        self,
        tenant_id: str,
        timeout: float,
        kind: ContextKind | None = None,
    ):
        super().__init__(
            f"Timed out after {timeout}s opening connection for tenant '{tenant_id}'",
            tenant_id,
            kind,
        )
        self.timeout = timeout


class ModelNotRegisteredError(TenancyError):
    """Raised when a model is requested that is not attached to a connection."""

    def __init__(self, name: str, tenant_id: str):
        super().__init__(f"Model '{name}' is not registered for tenant '{tenant_id}'")
        self.name = name
        self.tenant_id = tenant_id
