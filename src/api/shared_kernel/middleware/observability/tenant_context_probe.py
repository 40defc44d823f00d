"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to resolving the tenant of an inbound
HTTP request, RPC message or event, and to the connection it is routed to.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_resolved(self, tenant_id: str, source: str) -> None:
        """Record that a call was routed to a tenant connection."""
        ...

    def tenant_config_missing(self, source: str) -> None:
        """Record that no tenant identifier source is configured."""
        ...

    def tenant_identifier_missing(
        self,
        source: str,
        identifier: str | None,
    ) -> None:
        """Record that a call carried no tenant identifier."""
        ...

    def tenant_validation_failed(
        self,
        tenant_id: str,
        source: str,
        error: Exception,
    ) -> None:
        """Record that the validator rejected a tenant."""
        ...

    def tenant_connection_unavailable(
        self,
        tenant_id: str,
        source: str,
        error: Exception,
    ) -> None:
        """Record that no connection could be obtained for a tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

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
        return {k: v for k, v in self._context.as_dict().items() if k != "tenant_id"}

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_resolved(self, tenant_id: str, source: str) -> None:
        """Record that a call was routed to a tenant connection."""
        self._logger.debug(
            "tenant_context_resolved",
            tenant_id=tenant_id,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_config_missing(self, source: str) -> None:
        """Record that no tenant identifier source is configured."""
        self._logger.error(
            "tenant_context_config_missing",
            source=source,
            message="Neither a tenant identifier nor subdomain extraction is configured",
            **self._get_context_kwargs(),
        )

    def tenant_identifier_missing(
        self,
        source: str,
        identifier: str | None,
    ) -> None:
        """Record that a call carried no tenant identifier."""
        self._logger.warning(
            "tenant_context_identifier_missing",
            source=source,
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_validation_failed(
        self,
        tenant_id: str,
        source: str,
        error: Exception,
    ) -> None:
        """Record that the validator rejected a tenant."""
        self._logger.warning(
            "tenant_context_validation_failed",
            tenant_id=tenant_id,
            source=source,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def tenant_connection_unavailable(
        self,
        tenant_id: str,
        source: str,
        error: Exception,
    ) -> None:
        """Record that no connection could be obtained for a tenant."""
        self._logger.error(
            "tenant_context_connection_unavailable",
            tenant_id=tenant_id,
            source=source,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
