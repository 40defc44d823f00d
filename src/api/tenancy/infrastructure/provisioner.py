"""Provisioning of new tenant connections.

Builds the connection for a tenant seen for the first time: resolves its
database URL and engine options through the host supplied builders, opens
the engine, attaches every registered model (and its discriminators) and,
when configured, creates the collections eagerly.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.engines import (
    create_tenant_engine,
    merge_engine_options,
    redact_url,
)
from infrastructure.database.models import CollectionCatalog
from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)
from tenancy.domain.value_objects import ModelDefinition
from tenancy.infrastructure.tenant_connection import TenantConnection, TenantModel
from tenancy.ports.exceptions import (
    TenantConnectionError,
    TenantConnectionTimeoutError,
)
from tenancy.ports.options import TenancyModuleOptions

T = TypeVar("T")

EngineFactory = Callable[[str, Mapping[str, Any]], AsyncEngine]


async def _resolve(value: T | Awaitable[T]) -> T:
    """Await the value if a builder returned an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class ConnectionProvisioner:
    """Creates fully provisioned tenant connections.

    Nothing is cached here; the pool decides when provisioning runs.
    """

    def __init__(
        self,
        options: TenancyModuleOptions,
        catalog: CollectionCatalog | None = None,
        probe: ConnectionProbe | None = None,
        engine_factory: EngineFactory = create_tenant_engine,
    ):
        """Initialize the provisioner.

        Args:
            options: Tenancy options holding the URI/options builders
            catalog: Collection tables shared by every tenant
            probe: Optional observability probe
            engine_factory: Creates the engine from a URL and options
        """
        self._options = options
        self._catalog = catalog or CollectionCatalog()
        self._probe = probe or DefaultConnectionProbe()
        self._engine_factory = engine_factory

    @property
    def catalog(self) -> CollectionCatalog:
        return self._catalog

    async def provision(
        self,
        tenant_id: str,
        definitions: Iterable[ModelDefinition],
    ) -> TenantConnection:
        """Open and provision a new connection for a tenant.

        Args:
            tenant_id: The tenant the connection is for
            definitions: Registered model definitions to attach

        Returns:
            The provisioned connection.

        Raises:
            TenantConnectionTimeoutError: If opening exceeds ``connect_timeout``.
            TenantConnectionError: If the URL/options cannot be built, the
                database cannot be reached or collections cannot be created.
        """
        timeout = self._options.connect_timeout

        try:
            connection = await asyncio.wait_for(self._open(tenant_id), timeout)
        except asyncio.TimeoutError as e:
            self._probe.connection_timed_out(tenant_id=tenant_id, timeout=timeout or 0)
            raise TenantConnectionTimeoutError(tenant_id, timeout or 0) from e

        try:
            models = self.attach_definitions(connection, definitions)
            if self._options.force_create_collections:
                await asyncio.wait_for(connection.materialize_collections(), timeout)
        except BaseException as e:
            await connection.close()
            if isinstance(e, asyncio.TimeoutError):
                self._probe.connection_timed_out(tenant_id=tenant_id, timeout=timeout or 0)
                raise TenantConnectionTimeoutError(tenant_id, timeout or 0) from e
            if isinstance(e, Exception):
                self._probe.connection_failed(tenant_id=tenant_id, error=e)
                raise TenantConnectionError(
                    f"Failed to provision connection for tenant '{tenant_id}': {e}",
                    tenant_id,
                ) from e
            raise

        self._probe.connection_provisioned(
            tenant_id=tenant_id,
            url=connection.url,
            models=len(models),
        )
        return connection

    def attach_definitions(
        self,
        connection: TenantConnection,
        definitions: Iterable[ModelDefinition],
    ) -> list[TenantModel]:
        """Attach model definitions to a connection, in order.

        The base model is bound under its name and collection; each
        discriminator is bound to the same collection, tagged with its value.
        Names already attached keep their existing binding.

        Returns:
            Every model bound for the given definitions.
        """
        attached: list[TenantModel] = []
        for definition in definitions:
            table = self._catalog.table_for(
                definition.collection_name,
                definition.discriminator_key,
            )
            attached.append(
                connection.attach_model(
                    name=definition.name,
                    schema=definition.schema,
                    table=table,
                    discriminator_key=definition.discriminator_key,
                )
            )
            for discriminator in definition.discriminators:
                attached.append(
                    connection.attach_model(
                        name=discriminator.name,
                        schema=discriminator.schema,
                        table=table,
                        discriminator_key=definition.discriminator_key,
                        tag=discriminator.tag,
                    )
                )
        return attached

    async def _open(self, tenant_id: str) -> TenantConnection:
        try:
            uri = await _resolve(self._options.uri(tenant_id))
            builder = self._options.options
            extra = await _resolve(builder()) if builder is not None else None
            engine = self._engine_factory(uri, merge_engine_options(extra))
        except Exception as e:
            self._probe.connection_failed(tenant_id=tenant_id, error=e)
            raise TenantConnectionError(
                f"Failed to build connection for tenant '{tenant_id}': {e}",
                tenant_id,
            ) from e

        connection = TenantConnection(tenant_id, engine, probe=self._probe)
        try:
            await connection.ping()
        except BaseException as e:
            await connection.close()
            if not isinstance(e, Exception):
                raise
            self._probe.connection_failed(tenant_id=tenant_id, error=e)
            raise TenantConnectionError(
                f"Failed to connect to {redact_url(uri)} for tenant '{tenant_id}': {e}",
                tenant_id,
            ) from e
        return connection
