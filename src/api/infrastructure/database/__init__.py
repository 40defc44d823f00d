"""Database infrastructure - shared engine and collection primitives."""

from infrastructure.database.exceptions import (
    CollectionError,
    DatabaseConnectionError,
    DatabaseError,
)

__all__ = [
    "CollectionError",
    "DatabaseConnectionError",
    "DatabaseError",
]
