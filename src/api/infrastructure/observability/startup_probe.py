"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def feature_models_registered(self, feature: str, models: list[str]) -> None:
        """Record that a feature module registered its model definitions."""
        ...

    def shutdown_started(self, open_connections: int) -> None:
        """Record that graceful shutdown began closing tenant connections."""
        ...

    def shutdown_completed(self) -> None:
        """Record that every tenant connection was released."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def feature_models_registered(self, feature: str, models: list[str]) -> None:
        """Record that a feature module registered its model definitions."""
        self._logger.info(
            "feature_models_registered",
            feature=feature,
            models=models,
            **self._get_context_kwargs(),
        )

    def shutdown_started(self, open_connections: int) -> None:
        """Record that graceful shutdown began closing tenant connections."""
        self._logger.info(
            "tenancy_shutdown_started",
            open_connections=open_connections,
            **self._get_context_kwargs(),
        )

    def shutdown_completed(self) -> None:
        """Record that every tenant connection was released."""
        self._logger.info(
            "tenancy_shutdown_completed",
            **self._get_context_kwargs(),
        )
