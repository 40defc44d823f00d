"""Integration test fixtures for end-to-end tenancy tests.

The full application runs in-process against one SQLite file per tenant,
so no external database is required. Point TENANCY_INTEGRATION_URI_TEMPLATE
at a PostgreSQL server (``postgresql+asyncpg://.../tenant_{tenant_id}``) to
exercise a real server instead.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI

from main import create_app
from tenancy.application.services import TenancyService
from tenancy.dependencies import create_tenancy_service
from tenancy.ports.options import TenancyModuleOptions

TENANT_HEADER = "X-TENANT-ID"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs the full app)",
    )


@pytest.fixture
def uri_builder(tmp_path: Path) -> Callable[[str], str]:
    """Build the database URL of a tenant.

    Override with the TENANCY_INTEGRATION_URI_TEMPLATE environment variable.
    """
    template = os.getenv(
        "TENANCY_INTEGRATION_URI_TEMPLATE",
        f"sqlite+aiosqlite:///{tmp_path}/tenant_{{tenant_id}}.db",
    )

    def build(tenant_id: str) -> str:
        return template.replace("{tenant_id}", tenant_id)

    return build


@pytest.fixture
def build_service(
    uri_builder: Callable[[str], str],
) -> Callable[..., TenancyService]:
    """Factory for tenancy services sharing the tenant databases of one test."""

    def build(**overrides) -> TenancyService:
        options = {
            "uri": uri_builder,
            "tenant_identifier": TENANT_HEADER,
            **overrides,
        }
        return create_tenancy_service(
            TenancyModuleOptions(**options),
            connection_probe=MagicMock(),
            registry_probe=MagicMock(),
            service_probe=MagicMock(),
            context_probe=MagicMock(),
        )

    return build


@pytest.fixture
def tenancy_service(build_service: Callable[..., TenancyService]) -> TenancyService:
    return build_service()


@pytest.fixture
def app(tenancy_service: TenancyService) -> FastAPI:
    return create_app(service=tenancy_service, probe=MagicMock())


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client bound to the app, with its lifespan running."""
    async with LifespanManager(app) as manager:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=manager.app),
            base_url="http://test",
        ) as client:
            yield client
