"""In-memory registry of model definitions shared by every tenant.

Feature modules register their model definitions at startup. The registry
keeps them for the life of the process, in registration order, and is read
whenever a tenant connection is provisioned.
"""

from __future__ import annotations

from collections.abc import Iterator

from tenancy.domain.value_objects import ModelDefinition
from tenancy.infrastructure.observability import (
    DefaultSchemaRegistryProbe,
    SchemaRegistryProbe,
)


class SchemaRegistry:
    """Model definitions keyed by model name.

    The first registration of a name wins: registering a name again is a
    silent no-op that keeps the stored definition. Discriminators are part
    of their base definition, not separate entries.

    Mutations never await, so the registry is safe to share between
    concurrent calls on one event loop.
    """

    def __init__(self, probe: SchemaRegistryProbe | None = None) -> None:
        self._definitions: dict[str, ModelDefinition] = {}
        self._probe = probe or DefaultSchemaRegistryProbe()

    def register(self, definition: ModelDefinition) -> bool:
        """Register a model definition unless its name is already known.

        Args:
            definition: The model definition to store

        Returns:
            True if the definition was stored, False if the name existed.
        """
        if definition.name in self._definitions:
            self._probe.duplicate_registration_ignored(name=definition.name)
            return False

        self._definitions[definition.name] = definition
        self._probe.model_registered(
            name=definition.name,
            collection=definition.collection_name,
            discriminators=[d.name for d in definition.discriminators],
        )
        return True

    def has(self, name: str) -> bool:
        return name in self._definitions

    def get(self, name: str) -> ModelDefinition | None:
        return self._definitions.get(name)

    def all(self) -> list[ModelDefinition]:
        """Get every definition in registration order."""
        return list(self._definitions.values())

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[ModelDefinition]:
        return iter(self.all())
