"""Tenant connection and the model handles bound to it.

A ``TenantConnection`` owns one SQLAlchemy ``AsyncEngine`` pointed at a
tenant's database, plus the models attached to it. A ``TenantModel`` is
the queryable handle for one model name on one connection. Discriminator
models share their base model's collection: they stamp their tag on
insert and filter by it on read, while the base model sees every document.

Collections are created implicitly on first use, the way a document store
creates them on first insert. ``materialize_collections`` creates them
eagerly.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Table, delete, func, insert, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from ulid import ULID

from infrastructure.database.engines import redact_url
from infrastructure.database.exceptions import (
    CollectionError,
    DatabaseConnectionError,
)
from infrastructure.database.models import (
    CREATED_AT_COLUMN,
    DOCUMENT_COLUMN,
    ID_COLUMN,
)
from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)
from tenancy.ports.exceptions import ModelNotRegisteredError


class TenantModel:
    """Queryable handle for one model on one tenant connection."""

    def __init__(
        self,
        name: str,
        schema: type[BaseModel],
        table: Table,
        discriminator_key: str,
        connection: TenantConnection,
        tag: str | None = None,
    ):
        self._name = name
        self._schema = schema
        self._table = table
        self._discriminator_key = discriminator_key
        self._connection = connection
        self._tag = tag

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> type[BaseModel]:
        return self._schema

    @property
    def collection(self) -> str:
        return self._table.name

    @property
    def table(self) -> Table:
        return self._table

    @property
    def discriminator_key(self) -> str:
        return self._discriminator_key

    @property
    def tag(self) -> str | None:
        """Discriminator tag, None for a base model."""
        return self._tag

    @property
    def connection(self) -> TenantConnection:
        return self._connection

    async def create(self, data: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
        """Validate and insert one document.

        Args:
            data: Raw mapping or pydantic model, validated against the schema

        Returns:
            The stored document with its ``id`` and discriminator tag.

        Raises:
            pydantic.ValidationError: If the data does not match the schema.
            CollectionError: If the insert fails.
        """
        document = self._validate(data)
        document_id = str(ULID())

        await self._connection.ensure_collection(self._table)
        try:
            async with self._connection.engine.begin() as conn:
                await conn.execute(
                    insert(self._table).values(
                        {
                            ID_COLUMN: document_id,
                            self._discriminator_key: self._tag,
                            DOCUMENT_COLUMN: document,
                        }
                    )
                )
        except SQLAlchemyError as e:
            raise CollectionError(
                f"Failed to insert into '{self.collection}': {e}",
                collection=self.collection,
            ) from e

        return self._to_document(document_id, self._tag, document)

    async def find_all(self) -> list[dict[str, Any]]:
        """Return every document visible to this model, oldest first."""
        await self._connection.ensure_collection(self._table)
        statement = self._scoped(
            select(
                self._table.c[ID_COLUMN],
                self._table.c[self._discriminator_key],
                self._table.c[DOCUMENT_COLUMN],
            )
        ).order_by(self._table.c[CREATED_AT_COLUMN], self._table.c[ID_COLUMN])

        try:
            async with self._connection.engine.connect() as conn:
                result = await conn.execute(statement)
                rows = result.all()
        except SQLAlchemyError as e:
            raise CollectionError(
                f"Failed to read '{self.collection}': {e}",
                collection=self.collection,
            ) from e

        return [self._to_document(row[0], row[1], row[2]) for row in rows]

    async def count(self) -> int:
        """Count the documents visible to this model."""
        await self._connection.ensure_collection(self._table)
        statement = self._scoped(select(func.count()).select_from(self._table))
        try:
            async with self._connection.engine.connect() as conn:
                return int((await conn.execute(statement)).scalar_one())
        except SQLAlchemyError as e:
            raise CollectionError(
                f"Failed to count '{self.collection}': {e}",
                collection=self.collection,
            ) from e

    async def delete_many(self) -> int:
        """Delete every document visible to this model.

        Returns:
            Number of deleted documents
        """
        await self._connection.ensure_collection(self._table)
        statement = self._scoped(delete(self._table))
        try:
            async with self._connection.engine.begin() as conn:
                result = await conn.execute(statement)
        except SQLAlchemyError as e:
            raise CollectionError(
                f"Failed to delete from '{self.collection}': {e}",
                collection=self.collection,
            ) from e
        return result.rowcount or 0

    async def create_collection(self) -> None:
        """Create this model's collection if it does not exist yet."""
        await self._connection.ensure_collection(self._table, force=True)

    def _scoped(self, statement: Any) -> Any:
        if self._tag is None:
            return statement
        return statement.where(self._table.c[self._discriminator_key] == self._tag)

    def _validate(self, data: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        instance = self._schema.model_validate(dict(data))
        return instance.model_dump(mode="json", exclude={self._discriminator_key})

    def _to_document(
        self,
        document_id: str,
        tag: str | None,
        document: Mapping[str, Any],
    ) -> dict[str, Any]:
        result: dict[str, Any] = {"id": document_id, **document}
        if tag is not None:
            result[self._discriminator_key] = tag
        return result

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantModel(name={self._name}, collection={self.collection}, "
            f"tenant_id={self._connection.tenant_id})>"
        )


class TenantConnection:
    """An open database engine dedicated to one tenant.

    Created on a tenant's first resolution, reused for every later call
    carrying that tenant id, closed once at shutdown.
    """

    def __init__(
        self,
        tenant_id: str,
        engine: AsyncEngine,
        probe: ConnectionProbe | None = None,
    ):
        self._tenant_id = tenant_id
        self._engine = engine
        self._probe = probe or DefaultConnectionProbe()
        self._models: dict[str, TenantModel] = {}
        self._materialized: set[str] = set()
        self._ddl_lock = asyncio.Lock()
        self._closed = False

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    @property
    def engine(self) -> AsyncEngine:
        if self._closed:
            raise DatabaseConnectionError(
                f"Connection for tenant '{self._tenant_id}' is closed"
            )
        return self._engine

    @property
    def url(self) -> str:
        """Database URL with the password hidden."""
        return redact_url(str(self._engine.url))

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def models(self) -> Mapping[str, TenantModel]:
        """Read-only view of the attached models, by name."""
        return MappingProxyType(self._models)

    def has_model(self, name: str) -> bool:
        return name in self._models

    def get_model(self, name: str) -> TenantModel:
        """Get an attached model by name.

        Raises:
            ModelNotRegisteredError: If no model with that name is attached.
        """
        try:
            return self._models[name]
        except KeyError:
            raise ModelNotRegisteredError(name, self._tenant_id) from None

    def attach_model(
        self,
        name: str,
        schema: type[BaseModel],
        table: Table,
        discriminator_key: str,
        tag: str | None = None,
    ) -> TenantModel:
        """Bind a model to this connection, keeping an existing binding.

        Returns:
            The model attached under ``name``.
        """
        existing = self._models.get(name)
        if existing is not None:
            return existing

        model = TenantModel(
            name=name,
            schema=schema,
            table=table,
            discriminator_key=discriminator_key,
            connection=self,
            tag=tag,
        )
        self._models[name] = model
        return model

    async def ping(self) -> None:
        """Open a round trip to the database to prove it is reachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def ensure_collection(self, table: Table, force: bool = False) -> None:
        """Create a collection table unless it is already known to exist.

        Args:
            table: The collection table
            force: Check the database even if the table was created before
        """
        if not force and table.name in self._materialized:
            return

        async with self._ddl_lock:
            if not force and table.name in self._materialized:
                return
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(table.create, checkfirst=True)
            except SQLAlchemyError as e:
                raise CollectionError(
                    f"Failed to create collection '{table.name}': {e}",
                    collection=table.name,
                ) from e
            self._materialized.add(table.name)

    async def materialize_collections(self) -> list[str]:
        """Create the collection of every attached model.

        Returns:
            Names of the collections checked, in attachment order.
        """
        tables: dict[str, Table] = {}
        for model in self._models.values():
            tables.setdefault(model.collection, model.table)

        for table in tables.values():
            await self.ensure_collection(table, force=True)

        collections = list(tables)
        self._probe.collections_materialized(
            tenant_id=self._tenant_id,
            collections=collections,
        )
        return collections

    async def close(self) -> None:
        """Dispose the engine. Calling close again is a no-op."""
        if self._closed:
            return
        self._closed = True
        await self._engine.dispose()
        self._probe.connection_closed(tenant_id=self._tenant_id)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantConnection(tenant_id={self._tenant_id}, "
            f"models={len(self._models)}, closed={self._closed})>"
        )
