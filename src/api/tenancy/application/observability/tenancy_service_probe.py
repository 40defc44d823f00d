"""Domain probe for tenancy service operations.

Captures feature registrations and their replay onto tenant connections
that were already open when a feature registered its models.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenancyServiceProbe(Protocol):
    """Domain probe for tenancy service operations."""

    def model_replayed(self, name: str, tenant_ids: list[str]) -> None:
        """Record that a new model was attached to already open connections."""
        ...

    def with_context(self, context: ObservationContext) -> TenancyServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenancyServiceProbe:
    """Default implementation of TenancyServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenancyServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenancyServiceProbe(logger=self._logger, context=context)

    def model_replayed(self, name: str, tenant_ids: list[str]) -> None:
        """Record that a new model was attached to already open connections."""
        self._logger.info(
            "tenant_model_replayed",
            model=name,
            tenant_ids=tenant_ids,
            **self._get_context_kwargs(),
        )
