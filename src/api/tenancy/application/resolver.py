"""Resolution of the tenant connection serving an inbound call.

Extract the tenant id, let the configured validator veto it, then fetch
the tenant's cached connection or provision it once.
"""

from __future__ import annotations

import asyncio

from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.identifier_extraction import extract_tenant_id
from tenancy.domain.value_objects import ContextKind, RequestContext
from tenancy.ports.connections import (
    ConnectionFactory,
    ITenantConnection,
    ITenantConnectionPool,
)
from tenancy.ports.exceptions import (
    MissingTenantConfigError,
    MissingTenantIdentifierError,
    TenantConnectionError,
    TenantConnectionTimeoutError,
    TenantValidationError,
)
from tenancy.ports.options import TenancyModuleOptions


class TenantConnectionResolver:
    """Routes a call context to its tenant connection.

    Extraction and validation always happen before any connection is
    looked up, so a rejected call never opens a connection.
    """

    def __init__(
        self,
        options: TenancyModuleOptions,
        pool: ITenantConnectionPool,
        factory: ConnectionFactory,
        probe: TenantContextProbe | None = None,
    ):
        """Initialize the resolver.

        Args:
            options: Tenancy options (extraction strategy, validator, flags)
            pool: Pool caching one connection per tenant
            factory: Opens and provisions a connection on a pool miss
            probe: Optional observability probe
        """
        self._options = options
        self._pool = pool
        self._factory = factory
        self._probe = probe or DefaultTenantContextProbe()

    def identify(self, context: RequestContext) -> TenantContext:
        """Extract the tenant of a call without touching any connection.

        Raises:
            MissingTenantConfigError: If no identifier source is configured.
            MissingTenantIdentifierError: If the call carries no identifier.
        """
        source = str(context.kind)
        try:
            tenant_id = extract_tenant_id(context, self._options)
        except MissingTenantConfigError:
            self._probe.tenant_config_missing(source=source)
            raise
        except MissingTenantIdentifierError as e:
            self._probe.tenant_identifier_missing(source=source, identifier=e.identifier)
            raise
        return TenantContext(tenant_id=tenant_id.value, source=source)

    async def validate(self, tenant: TenantContext) -> None:
        """Run the configured validator for a tenant, if any.

        Raises:
            TenantValidationError: Wrapping whatever the validator raised.
        """
        factory = self._options.validator
        if factory is None:
            return

        try:
            await factory(tenant.tenant_id).validate()
        except Exception as e:
            self._probe.tenant_validation_failed(
                tenant_id=tenant.tenant_id,
                source=tenant.source,
                error=e,
            )
            raise TenantValidationError(
                tenant.tenant_id, e, kind=_kind_of(tenant)
            ) from e

    async def resolve(self, context: RequestContext) -> ITenantConnection:
        """Resolve the connection serving a call.

        Args:
            context: Normalized HTTP, RPC or event context

        Returns:
            The tenant's connection, with every registered model attached.

        Raises:
            MissingTenantConfigError: If no identifier source is configured.
            MissingTenantIdentifierError: If the call carries no identifier.
            TenantValidationError: If the validator rejects the tenant.
            TenantConnectionError: If the connection cannot be opened.
        """
        _, connection = await self.resolve_tenant(context)
        return connection

    async def resolve_tenant(
        self,
        context: RequestContext,
    ) -> tuple[TenantContext, ITenantConnection]:
        """Resolve a call to its tenant context and connection."""
        tenant = self.identify(context)
        await self.validate(tenant)
        kind = _kind_of(tenant)

        try:
            cached = self._pool.get(tenant.tenant_id)
            connection = await self._pool.get_or_create(
                tenant.tenant_id, self._factory
            )
            if cached is not None and self._options.force_create_collections:
                await self._materialize(tenant, connection)
        except TenantConnectionError as e:
            self._probe.tenant_connection_unavailable(
                tenant_id=tenant.tenant_id,
                source=tenant.source,
                error=e,
            )
            if e.kind == kind:
                raise
            # Callers joined on one provisioning share the raised error
            raise _with_kind(e, kind) from e
        except Exception as e:
            self._probe.tenant_connection_unavailable(
                tenant_id=tenant.tenant_id,
                source=tenant.source,
                error=e,
            )
            raise TenantConnectionError(
                f"Connection for tenant '{tenant.tenant_id}' is unavailable: {e}",
                tenant.tenant_id,
                kind=kind,
            ) from e

        self._probe.tenant_resolved(tenant_id=tenant.tenant_id, source=tenant.source)
        return tenant, connection

    async def _materialize(
        self,
        tenant: TenantContext,
        connection: ITenantConnection,
    ) -> None:
        """Create the collections of a cached connection within the timeout.

        Raises:
            TenantConnectionTimeoutError: If creation exceeds ``connect_timeout``.
        """
        timeout = self._options.connect_timeout
        try:
            await asyncio.wait_for(connection.materialize_collections(), timeout)
        except asyncio.TimeoutError as e:
            raise TenantConnectionTimeoutError(
                tenant.tenant_id, timeout or 0, kind=_kind_of(tenant)
            ) from e


def _kind_of(tenant: TenantContext) -> ContextKind:
    return ContextKind(tenant.source)


def _with_kind(
    error: TenantConnectionError,
    kind: ContextKind,
) -> TenantConnectionError:
    """Copy a connection error, tagged with the kind of the failing call."""
    if isinstance(error, TenantConnectionTimeoutError):
        return TenantConnectionTimeoutError(error.tenant_id, error.timeout, kind=kind)
    return TenantConnectionError(str(error), error.tenant_id, kind=kind)
