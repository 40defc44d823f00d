"""Tenancy application service.

Owns the schema registry, the connection pool and the provisioner for
the life of the process. Feature modules register their models through
it, transport adapters resolve tenant connections through it and the
application lifespan shuts it down.

The concrete collaborators are wired in ``tenancy.dependencies``.
"""

from __future__ import annotations

from collections.abc import Iterable

from shared_kernel.middleware.observability import TenantContextProbe
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.observability import (
    DefaultTenancyServiceProbe,
    TenancyServiceProbe,
)
from tenancy.application.resolver import TenantConnectionResolver
from tenancy.domain.value_objects import ModelDefinition, RequestContext
from tenancy.ports.connections import (
    IConnectionProvisioner,
    ISchemaRegistry,
    ITenantConnection,
    ITenantConnectionPool,
)
from tenancy.ports.options import TenancyModuleOptions


class TenancyService:
    """Per-tenant connection routing for one application instance."""

    def __init__(
        self,
        options: TenancyModuleOptions,
        registry: ISchemaRegistry,
        pool: ITenantConnectionPool,
        provisioner: IConnectionProvisioner,
        probe: TenancyServiceProbe | None = None,
        context_probe: TenantContextProbe | None = None,
    ):
        """Initialize TenancyService with its collaborators.

        Args:
            options: Tenancy options supplied by the host application
            registry: Registry of model definitions
            pool: Connection pool, at most one connection per tenant
            provisioner: Opens new tenant connections
            probe: Probe for registration events
            context_probe: Probe for tenant resolution events
        """
        self._options = options
        self._registry = registry
        self._pool = pool
        self._provisioner = provisioner
        self._probe = probe or DefaultTenancyServiceProbe()
        self._resolver = TenantConnectionResolver(
            options,
            pool=self._pool,
            factory=self._open_connection,
            probe=context_probe,
        )

    @property
    def options(self) -> TenancyModuleOptions:
        return self._options

    @property
    def registry(self) -> ISchemaRegistry:
        return self._registry

    @property
    def pool(self) -> ITenantConnectionPool:
        return self._pool

    @property
    def resolver(self) -> TenantConnectionResolver:
        return self._resolver

    def register_models(self, definitions: Iterable[ModelDefinition]) -> list[str]:
        """Register a feature's model definitions.

        Each new definition is attached right away to every connection that
        is already open. Names registered before keep their first
        definition.

        Args:
            definitions: The feature's model definitions

        Returns:
            Names of the definitions that were newly stored.
        """
        registered = [
            definition
            for definition in definitions
            if self._registry.register(definition)
        ]

        connections = self._pool.connections()
        if registered and connections:
            for connection in connections:
                self._provisioner.attach_definitions(connection, registered)
            tenant_ids = [connection.tenant_id for connection in connections]
            for definition in registered:
                self._probe.model_replayed(
                    name=definition.name,
                    tenant_ids=tenant_ids,
                )

        return [definition.name for definition in registered]

    async def resolve(self, context: RequestContext) -> ITenantConnection:
        """Resolve the tenant connection serving a call."""
        return await self._resolver.resolve(context)

    async def resolve_tenant(
        self,
        context: RequestContext,
    ) -> tuple[TenantContext, ITenantConnection]:
        """Resolve a call to its tenant context and connection."""
        return await self._resolver.resolve_tenant(context)

    async def shutdown(self) -> int:
        """Close every tenant connection.

        Returns:
            Number of connections closed.
        """
        return await self._pool.close_all()

    async def _open_connection(self, tenant_id: str) -> ITenantConnection:
        connection = await self._provisioner.provision(
            tenant_id, self._registry.all()
        )
        # Models registered while provisioning was in flight
        self._provisioner.attach_definitions(connection, self._registry.all())
        return connection
