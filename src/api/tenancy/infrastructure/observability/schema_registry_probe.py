"""Domain probe for model definition registration.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of the schema registry: new models
and duplicate registrations that were ignored.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class SchemaRegistryProbe(Protocol):
    """Domain probe for schema registry operations."""

    def model_registered(self, name: str, collection: str, discriminators: list[str]) -> None:
        """Record that a model definition was added to the registry."""
        ...

    def duplicate_registration_ignored(self, name: str) -> None:
        """Record that a second registration for a known name was dropped."""
        ...

    def with_context(self, context: ObservationContext) -> SchemaRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSchemaRegistryProbe:
    """Default implementation of SchemaRegistryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultSchemaRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultSchemaRegistryProbe(logger=self._logger, context=context)

    def model_registered(self, name: str, collection: str, discriminators: list[str]) -> None:
        """Record that a model definition was added to the registry."""
        self._logger.info(
            "tenant_model_registered",
            model=name,
            collection=collection,
            discriminators=discriminators,
            **self._get_context_kwargs(),
        )

    def duplicate_registration_ignored(self, name: str) -> None:
        """Record that a second registration for a known name was dropped."""
        self._logger.debug(
            "tenant_model_duplicate_registration_ignored",
            model=name,
            **self._get_context_kwargs(),
        )

