"""SQLAlchemy table layout for tenant document collections.

Every collection is rendered as one table holding JSON documents, with a
dedicated column for the discriminator tag so polymorphic models can share
a collection and still be filtered cheaply.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, MetaData, String, Table

DOCUMENT_COLUMN = "document"
ID_COLUMN = "id"
CREATED_AT_COLUMN = "created_at"


def _utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    Ensures proper INSERT-time evaluation.
    """
    return datetime.now(timezone.utc)


class CollectionCatalog:
    """Registry of collection tables, shared by every tenant engine.

    Tables are plain SQLAlchemy Core metadata, they are not bound to an
    engine, so one catalog serves all tenant connections.
    """

    def __init__(self, metadata: MetaData | None = None) -> None:
        self._metadata = metadata or MetaData()

    @property
    def metadata(self) -> MetaData:
        """The MetaData holding every collection table."""
        return self._metadata

    def table_for(self, collection: str, discriminator_key: str) -> Table:
        """Return the table for a collection, defining it on first use.

        A collection shared by a base model and its discriminators is defined
        once; later calls return the existing table unchanged.

        Args:
            collection: Collection (table) name
            discriminator_key: Name of the tag column

        Returns:
            The collection table
        """
        existing = self._metadata.tables.get(collection)
        if existing is not None:
            return existing

        return Table(
            collection,
            self._metadata,
            Column(ID_COLUMN, String(26), primary_key=True),
            Column(discriminator_key, String(255), nullable=True, index=True),
            Column(DOCUMENT_COLUMN, JSON, nullable=False),
            Column(
                CREATED_AT_COLUMN,
                DateTime(timezone=True),
                default=_utc_now,  # Evaluated at INSERT time
                nullable=False,
            ),
        )
