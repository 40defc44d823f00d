"""Unit tests for the TenantContext shared value object and TenantContextProbe.

Tests the pure value object from the shared kernel and the domain probe
protocol + default implementation.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import structlog

from infrastructure.observability import ObservationContext
from shared_kernel.middleware.observability.tenant_context_probe import (
    DefaultTenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext


class TestTenantContext:
    """Tests for the TenantContext value object."""

    def test_tenant_context_is_immutable(self) -> None:
        """TenantContext should be a frozen dataclass."""
        context = TenantContext(tenant_id="dog-club", source="http")
        with pytest.raises(AttributeError):
            context.tenant_id = "something-else"  # type: ignore[misc]

    @pytest.mark.parametrize("source", ["http", "rpc", "ws"])
    def test_tenant_context_stores_source(self, source: str) -> None:
        """TenantContext should store the kind of call it came from."""
        context = TenantContext(tenant_id="dog-club", source=source)
        assert context.source == source
        assert context.tenant_id == "dog-club"

    def test_tenant_context_equality(self) -> None:
        """Two TenantContext instances with same values should be equal."""
        a = TenantContext(tenant_id="abc", source="http")
        b = TenantContext(tenant_id="abc", source="http")
        assert a == b

    def test_tenant_context_inequality(self) -> None:
        """Two TenantContext instances with different values should not be equal."""
        a = TenantContext(tenant_id="abc", source="http")
        b = TenantContext(tenant_id="abc", source="rpc")
        assert a != b


class TestDefaultTenantContextProbe:
    """Tests for the structlog backed tenant context probe."""

    @pytest.fixture
    def mock_logger(self) -> MagicMock:
        return MagicMock(spec=structlog.stdlib.BoundLogger)

    def test_tenant_resolved_logs_debug(self, mock_logger: MagicMock) -> None:
        probe = DefaultTenantContextProbe(logger=mock_logger)

        probe.tenant_resolved(tenant_id="dog-club", source="http")

        mock_logger.debug.assert_called_once_with(
            "tenant_context_resolved",
            tenant_id="dog-club",
            source="http",
        )

    def test_tenant_config_missing_logs_error(self, mock_logger: MagicMock) -> None:
        probe = DefaultTenantContextProbe(logger=mock_logger)

        probe.tenant_config_missing(source="rpc")

        mock_logger.error.assert_called_once()
        args, kwargs = mock_logger.error.call_args
        assert args == ("tenant_context_config_missing",)
        assert kwargs["source"] == "rpc"

    def test_tenant_identifier_missing_logs_warning(
        self, mock_logger: MagicMock
    ) -> None:
        probe = DefaultTenantContextProbe(logger=mock_logger)

        probe.tenant_identifier_missing(source="http", identifier="X-TENANT-ID")

        mock_logger.warning.assert_called_once_with(
            "tenant_context_identifier_missing",
            source="http",
            identifier="X-TENANT-ID",
        )

    def test_tenant_validation_failed_logs_error_type(
        self, mock_logger: MagicMock
    ) -> None:
        probe = DefaultTenantContextProbe(logger=mock_logger)

        probe.tenant_validation_failed(
            tenant_id="banned",
            source="ws",
            error=PermissionError("not allowed"),
        )

        mock_logger.warning.assert_called_once_with(
            "tenant_context_validation_failed",
            tenant_id="banned",
            source="ws",
            error="not allowed",
            error_type="PermissionError",
        )

    def test_tenant_connection_unavailable_logs_error(
        self, mock_logger: MagicMock
    ) -> None:
        probe = DefaultTenantContextProbe(logger=mock_logger)

        probe.tenant_connection_unavailable(
            tenant_id="dog-club",
            source="http",
            error=ConnectionError("refused"),
        )

        mock_logger.error.assert_called_once_with(
            "tenant_context_connection_unavailable",
            tenant_id="dog-club",
            source="http",
            error="refused",
            error_type="ConnectionError",
        )

    def test_context_excludes_tenant(self, mock_logger: MagicMock) -> None:
        """Bound context must not clash with the explicit event arguments."""
        context = ObservationContext(
            request_id="req-1",
            tenant_id="other",
            extra={"feature": "dogs"},
        )
        probe = DefaultTenantContextProbe(logger=mock_logger).with_context(context)

        probe.tenant_resolved(tenant_id="dog-club", source="http")

        mock_logger.debug.assert_called_once_with(
            "tenant_context_resolved",
            tenant_id="dog-club",
            source="http",
            request_id="req-1",
            feature="dogs",
        )
