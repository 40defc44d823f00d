"""Process-wide pool of tenant connections.

Holds at most one open connection per tenant id. Concurrent first calls
for the same tenant share a single provisioning: the first caller starts
it, later callers await the same task. A failed provisioning leaves
nothing behind, so the next call retries.
"""

from __future__ import annotations

import asyncio

from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)
from tenancy.infrastructure.tenant_connection import TenantConnection
from tenancy.ports.connections import ConnectionFactory


class TenantConnectionPool:
    """Tenant id to open connection map with single-flight creation.

    All bookkeeping happens between awaits on one event loop, so no lock
    is needed around the maps.
    """

    def __init__(self, probe: ConnectionProbe | None = None):
        self._probe = probe or DefaultConnectionProbe()
        self._connections: dict[str, TenantConnection] = {}
        self._inflight: dict[str, asyncio.Task[TenantConnection]] = {}

    def get(self, tenant_id: str) -> TenantConnection | None:
        """Get the open connection of a tenant, if any."""
        return self._connections.get(tenant_id)

    def connections(self) -> list[TenantConnection]:
        """Snapshot of every open connection."""
        return list(self._connections.values())

    def is_provisioning(self, tenant_id: str) -> bool:
        return tenant_id in self._inflight

    async def get_or_create(
        self,
        tenant_id: str,
        factory: ConnectionFactory,
    ) -> TenantConnection:
        """Return the tenant's connection, creating it on first use.

        Args:
            tenant_id: The tenant to look up
            factory: Opens and provisions a new connection for the tenant

        Returns:
            The single connection of the tenant.

        Raises:
            Whatever the factory raised, to every caller that awaited it.
        """
        existing = self._connections.get(tenant_id)
        if existing is not None:
            self._probe.connection_reused(tenant_id=tenant_id)
            return existing

        task = self._inflight.get(tenant_id)
        if task is None:
            task = asyncio.create_task(self._create(tenant_id, factory))
            self._inflight[tenant_id] = task
        else:
            self._probe.provisioning_joined(tenant_id=tenant_id)

        # A cancelled caller must not cancel the provisioning others await
        return await asyncio.shield(task)

    async def _create(
        self,
        tenant_id: str,
        factory: ConnectionFactory,
    ) -> TenantConnection:
        try:
            connection = await factory(tenant_id)
            self._connections[tenant_id] = connection
            return connection
        finally:
            self._inflight.pop(tenant_id, None)

    async def close_all(self) -> int:
        """Close every connection, best effort.

        In-flight provisionings are awaited first so their connections are
        closed too. A failing close is logged and does not stop the others.

        Returns:
            Number of connections that were closed.
        """
        if self._inflight:
            await asyncio.gather(*self._inflight.values(), return_exceptions=True)

        connections = list(self._connections.items())
        self._connections.clear()

        results = await asyncio.gather(
            *(connection.close() for _, connection in connections),
            return_exceptions=True,
        )
        for (tenant_id, _), result in zip(connections, results):
            if isinstance(result, BaseException):
                self._probe.connection_close_failed(tenant_id=tenant_id, error=result)

        self._probe.pool_closed(connections=len(connections))
        return len(connections)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
