"""Unit tests for TenantConnectionPool.

Connections are mocks; the tests cover caching, single-flight creation,
failure handling and shutdown.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from tenancy.infrastructure.connection_pool import TenantConnectionPool
from tenancy.infrastructure.tenant_connection import TenantConnection


def _mock_connection(tenant_id: str) -> MagicMock:
    connection = MagicMock(spec=TenantConnection)
    connection.tenant_id = tenant_id
    connection.close = AsyncMock()
    return connection


@pytest.fixture
def pool(mock_connection_probe: MagicMock) -> TenantConnectionPool:
    return TenantConnectionPool(probe=mock_connection_probe)


class TestGetOrCreate:
    """Tests for TenantConnectionPool.get_or_create()."""

    @pytest.mark.asyncio
    async def test_creates_once_and_reuses(
        self,
        pool: TenantConnectionPool,
        mock_connection_probe: MagicMock,
    ) -> None:
        """Should call the factory on the first call only."""
        factory = AsyncMock(side_effect=_mock_connection)

        first = await pool.get_or_create("acme", factory)
        second = await pool.get_or_create("acme", factory)

        assert first is second
        factory.assert_awaited_once_with("acme")
        assert pool.get("acme") is first
        assert "acme" in pool
        mock_connection_probe.connection_reused.assert_called_once_with(
            tenant_id="acme"
        )

    @pytest.mark.asyncio
    async def test_one_connection_per_tenant(self, pool: TenantConnectionPool) -> None:
        """Should keep separate connections for separate tenants."""
        factory = AsyncMock(side_effect=_mock_connection)

        acme = await pool.get_or_create("acme", factory)
        globex = await pool.get_or_create("globex", factory)

        assert acme is not globex
        assert len(pool) == 2

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_share_one_provisioning(
        self,
        pool: TenantConnectionPool,
        mock_connection_probe: MagicMock,
    ) -> None:
        """Should run the factory once for concurrent callers of a new tenant."""
        calls = 0
        release = asyncio.Event()

        async def slow_factory(tenant_id: str) -> MagicMock:
            nonlocal calls
            calls += 1
            await release.wait()
            return _mock_connection(tenant_id)

        waiters = [
            asyncio.create_task(pool.get_or_create("acme", slow_factory))
            for _ in range(10)
        ]
        await asyncio.sleep(0)
        assert pool.is_provisioning("acme")

        release.set()
        results = await asyncio.gather(*waiters)

        assert calls == 1
        assert all(result is results[0] for result in results)
        assert len(pool) == 1
        assert not pool.is_provisioning("acme")
        assert mock_connection_probe.provisioning_joined.call_count == 9

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, pool: TenantConnectionPool) -> None:
        """Should leave nothing behind when the factory fails."""
        factory = AsyncMock(side_effect=[RuntimeError("down"), _mock_connection("acme")])

        with pytest.raises(RuntimeError):
            await pool.get_or_create("acme", factory)

        assert pool.get("acme") is None
        assert not pool.is_provisioning("acme")

        connection = await pool.get_or_create("acme", factory)
        assert pool.get("acme") is connection

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(
        self, pool: TenantConnectionPool
    ) -> None:
        """Should raise the factory error to every concurrent caller."""
        release = asyncio.Event()

        async def failing_factory(tenant_id: str) -> MagicMock:
            await release.wait()
            raise RuntimeError("down")

        waiters = [
            asyncio.create_task(pool.get_or_create("acme", failing_factory))
            for _ in range(3)
        ]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert all(isinstance(result, RuntimeError) for result in results)
        assert len(pool) == 0

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_provisioning(
        self, pool: TenantConnectionPool
    ) -> None:
        """Should finish provisioning for others when one caller is cancelled."""
        release = asyncio.Event()

        async def slow_factory(tenant_id: str) -> MagicMock:
            await release.wait()
            return _mock_connection(tenant_id)

        cancelled = asyncio.create_task(pool.get_or_create("acme", slow_factory))
        survivor = asyncio.create_task(pool.get_or_create("acme", slow_factory))
        await asyncio.sleep(0)

        cancelled.cancel()
        with pytest.raises(asyncio.CancelledError):
            await cancelled

        release.set()
        connection = await survivor

        assert pool.get("acme") is connection


class TestCloseAll:
    """Tests for TenantConnectionPool.close_all()."""

    @pytest.mark.asyncio
    async def test_closes_every_connection(
        self,
        pool: TenantConnectionPool,
        mock_connection_probe: MagicMock,
    ) -> None:
        """Should close each connection once and empty the pool."""
        factory = AsyncMock(side_effect=_mock_connection)
        acme = await pool.get_or_create("acme", factory)
        globex = await pool.get_or_create("globex", factory)

        closed = await pool.close_all()

        assert closed == 2
        acme.close.assert_awaited_once()
        globex.close.assert_awaited_once()
        assert len(pool) == 0
        mock_connection_probe.pool_closed.assert_called_once_with(connections=2)

    @pytest.mark.asyncio
    async def test_close_failure_does_not_stop_others(
        self,
        pool: TenantConnectionPool,
        mock_connection_probe: MagicMock,
    ) -> None:
        """Should log a failing close and keep closing the rest."""
        broken = _mock_connection("acme")
        broken.close.side_effect = RuntimeError("boom")
        healthy = _mock_connection("globex")
        factory = AsyncMock(side_effect=[broken, healthy])
        await pool.get_or_create("acme", factory)
        await pool.get_or_create("globex", factory)

        await pool.close_all()

        healthy.close.assert_awaited_once()
        mock_connection_probe.connection_close_failed.assert_called_once()
        call = mock_connection_probe.connection_close_failed.call_args
        assert call.kwargs["tenant_id"] == "acme"
        assert isinstance(call.kwargs["error"], RuntimeError)

    @pytest.mark.asyncio
    async def test_waits_for_inflight_provisioning(
        self, pool: TenantConnectionPool
    ) -> None:
        """Should close connections whose provisioning was still running."""
        release = asyncio.Event()
        created: list[MagicMock] = []

        async def slow_factory(tenant_id: str) -> MagicMock:
            await release.wait()
            connection = _mock_connection(tenant_id)
            created.append(connection)
            return connection

        waiter = asyncio.create_task(pool.get_or_create("acme", slow_factory))
        await asyncio.sleep(0)

        closing = asyncio.create_task(pool.close_all())
        await asyncio.sleep(0)
        release.set()

        assert await closing == 1
        await waiter
        created[0].close.assert_awaited_once()
        assert len(pool) == 0

    @pytest.mark.asyncio
    async def test_empty_pool(self, pool: TenantConnectionPool) -> None:
        """Should succeed with nothing to close."""
        assert await pool.close_all() == 0

    @pytest.mark.asyncio
    async def test_pool_is_usable_after_close(
        self, pool: TenantConnectionPool
    ) -> None:
        """Should provision afresh after shutdown."""
        factory = AsyncMock(side_effect=_mock_connection)
        first = await pool.get_or_create("acme", factory)
        await pool.close_all()

        second = await pool.get_or_create("acme", factory)

        assert second is not first
        assert factory.await_count == 2
