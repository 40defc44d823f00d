"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for tenant connection observability.

    This probe captures domain-significant events related to the lifecycle
    of tenant connections without exposing logging implementation details.
    """

    def connection_provisioned(self, tenant_id: str, url: str, models: int) -> None:
        """Record that a new tenant connection was opened and provisioned."""
        ...

    def connection_failed(self, tenant_id: str, error: Exception) -> None:
        """Record that opening a tenant connection failed."""
        ...

    def connection_timed_out(self, tenant_id: str, timeout: float) -> None:
        """Record that opening a tenant connection exceeded its time budget."""
        ...

    def connection_reused(self, tenant_id: str) -> None:
        """Record that a cached tenant connection served a call."""
        ...

    def provisioning_joined(self, tenant_id: str) -> None:
        """Record that a caller awaited an in-flight provisioning."""
        ...

    def collections_materialized(self, tenant_id: str, collections: list[str]) -> None:
        """Record that collections were created on a tenant connection."""
        ...

    def connection_closed(self, tenant_id: str) -> None:
        """Record that a tenant connection was closed."""
        ...

    def connection_close_failed(self, tenant_id: str, error: BaseException) -> None:
        """Record that closing a tenant connection failed."""
        ...

    def pool_closed(self, connections: int) -> None:
        """Record that the tenant connection pool was shut down."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

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
        # tenant_id is always passed explicitly by the events below
        return {k: v for k, v in self._context.as_dict().items() if k != "tenant_id"}

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def connection_provisioned(self, tenant_id: str, url: str, models: int) -> None:
        """Record that a new tenant connection was opened and provisioned."""
        self._logger.info(
            "tenant_connection_provisioned",
            tenant_id=tenant_id,
            url=url,
            models=models,
            **self._get_context_kwargs(),
        )

    def connection_failed(self, tenant_id: str, error: Exception) -> None:
        """Record that opening a tenant connection failed."""
        self._logger.error(
            "tenant_connection_failed",
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def connection_timed_out(self, tenant_id: str, timeout: float) -> None:
        """Record that opening a tenant connection exceeded its time budget."""
        self._logger.error(
            "tenant_connection_timed_out",
            tenant_id=tenant_id,
            timeout_seconds=timeout,
            **self._get_context_kwargs(),
        )

    def connection_reused(self, tenant_id: str) -> None:
        """Record that a cached tenant connection served a call."""
        self._logger.debug(
            "tenant_connection_reused",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def provisioning_joined(self, tenant_id: str) -> None:
        """Record that a caller awaited an in-flight provisioning."""
        self._logger.debug(
            "tenant_connection_provisioning_joined",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def collections_materialized(self, tenant_id: str, collections: list[str]) -> None:
        """Record that collections were created on a tenant connection."""
        self._logger.debug(
            "tenant_collections_materialized",
            tenant_id=tenant_id,
            collections=collections,
            **self._get_context_kwargs(),
        )

    def connection_closed(self, tenant_id: str) -> None:
        """Record that a tenant connection was closed."""
        self._logger.info(
            "tenant_connection_closed",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def connection_close_failed(self, tenant_id: str, error: BaseException) -> None:
        """Record that closing a tenant connection failed."""
        self._logger.warning(
            "tenant_connection_close_failed",
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def pool_closed(self, connections: int) -> None:
        """Record that the tenant connection pool was shut down."""
        self._logger.info(
            "tenant_connection_pool_closed",
            connections=connections,
            **self._get_context_kwargs(),
        )
