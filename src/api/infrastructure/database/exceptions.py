"""Database-specific exceptions shared by every tenant connection."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when a database engine cannot be opened or reached."""

    pass


class CollectionError(DatabaseError):
    """Raised when a collection cannot be created or queried."""

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection
