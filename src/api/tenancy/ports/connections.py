"""Connection protocols (ports) for the Tenancy bounded context.

The application layer routes calls through these interfaces only. The
SQLAlchemy backed implementations live in ``tenancy.infrastructure`` and
are wired together in ``tenancy.dependencies``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from tenancy.domain.value_objects import ModelDefinition


@runtime_checkable
class ITenantModel(Protocol):
    """Queryable handle for one model on one tenant connection.

    A discriminator model stamps its tag on insert and sees only documents
    carrying that tag. A base model sees every document of its collection.
    """

    @property
    def name(self) -> str: ...

    @property
    def collection(self) -> str: ...

    async def create(self, data: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
        """Validate and store one document, returning it with its ``id``.

        Raises:
            pydantic.ValidationError: If the data does not match the schema.
        """
        ...

    async def find_all(self) -> list[dict[str, Any]]:
        """Return every document visible to this model, oldest first."""
        ...

    async def count(self) -> int:
        """Count the documents visible to this model."""
        ...

    async def delete_many(self) -> int:
        """Delete every document visible to this model."""
        ...


@runtime_checkable
class ITenantConnection(Protocol):
    """An open database connection dedicated to one tenant."""

    @property
    def tenant_id(self) -> str: ...

    @property
    def models(self) -> Mapping[str, ITenantModel]: ...

    def has_model(self, name: str) -> bool: ...

    def get_model(self, name: str) -> ITenantModel:
        """Get an attached model by name.

        Raises:
            ModelNotRegisteredError: If no model with that name is attached.
        """
        ...

    async def ping(self) -> None:
        """Prove the database is reachable."""
        ...

    async def materialize_collections(self) -> list[str]:
        """Create the collection of every attached model."""
        ...

    async def close(self) -> None:
        """Release the connection. Calling close again is a no-op."""
        ...


ConnectionFactory = Callable[[str], Awaitable[ITenantConnection]]
"""Opens and provisions a new connection for a tenant id."""


@runtime_checkable
class ISchemaRegistry(Protocol):
    """Model definitions registered by feature modules, keyed by name.

    The first registration of a name wins.
    """

    def register(self, definition: ModelDefinition) -> bool:
        """Store a definition, returning False if the name was already known."""
        ...

    def get(self, name: str) -> ModelDefinition | None: ...

    def all(self) -> list[ModelDefinition]:
        """Every definition in registration order."""
        ...

    def __contains__(self, name: object) -> bool: ...

    def __len__(self) -> int: ...


@runtime_checkable
class ITenantConnectionPool(Protocol):
    """At most one open connection per tenant id."""

    def get(self, tenant_id: str) -> ITenantConnection | None: ...

    def connections(self) -> list[ITenantConnection]: ...

    async def get_or_create(
        self,
        tenant_id: str,
        factory: ConnectionFactory,
    ) -> ITenantConnection:
        """Return the tenant's connection, running ``factory`` once on a miss.

        Concurrent callers for the same tenant share one factory run.
        """
        ...

    async def close_all(self) -> int:
        """Close every connection, best effort, and empty the pool."""
        ...

    def __contains__(self, tenant_id: object) -> bool: ...

    def __len__(self) -> int: ...


@runtime_checkable
class IConnectionProvisioner(Protocol):
    """Opens new tenant connections and binds model definitions to them."""

    async def provision(
        self,
        tenant_id: str,
        definitions: Iterable[ModelDefinition],
    ) -> ITenantConnection:
        """Open a connection for a tenant and attach the definitions.

        Raises:
            TenantConnectionTimeoutError: If opening exceeds the timeout.
            TenantConnectionError: If the connection cannot be opened.
        """
        ...

    def attach_definitions(
        self,
        connection: Any,
        definitions: Iterable[ModelDefinition],
    ) -> list[ITenantModel]:
        """Attach definitions to an open connection, keeping existing bindings."""
        ...
