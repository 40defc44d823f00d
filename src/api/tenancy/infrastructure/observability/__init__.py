"""Observability for tenancy infrastructure."""

from tenancy.infrastructure.observability.schema_registry_probe import (
    DefaultSchemaRegistryProbe,
    SchemaRegistryProbe,
)

__all__ = [
    "DefaultSchemaRegistryProbe",
    "SchemaRegistryProbe",
]
