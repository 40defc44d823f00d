"""Tenancy options: the configuration contract the host application hands
to the tenancy service. It is consumed, never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

from tenancy.ports.protocols import OptionsBuilder, UriBuilder, ValidatorFactory


@dataclass(frozen=True)
class TenancyModuleOptions:
    """Options controlling tenant extraction and connection provisioning.

    Attributes:
        uri: Builds the tenant database URL from the tenant id (may be async)
        tenant_identifier: Header name (HTTP) or payload field (RPC/events)
            carrying the tenant id
        is_tenant_from_subdomain: Extract HTTP tenants from the host subdomain
        options: Builds driver specific engine options (may be async)
        validator: Builds a validator for a tenant id, called on every resolution
        force_create_collections: Create every attached collection when a
            tenant is resolved, needed where transactions refuse to create
            collections implicitly
        connect_timeout: Seconds allowed for building the URI/options and
            opening the connection; None disables the bound
    """

    uri: UriBuilder
    tenant_identifier: str | None = None
    is_tenant_from_subdomain: bool = False
    options: OptionsBuilder | None = None
    validator: ValidatorFactory | None = None
    force_create_collections: bool = False
    connect_timeout: float | None = 10.0

    @property
    def has_identifier_source(self) -> bool:
        """Whether any tenant extraction strategy is configured."""
        return bool(self.tenant_identifier) or self.is_tenant_from_subdomain
