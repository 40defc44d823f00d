"""Unit tests for Tenancy FastAPI dependencies.

Mounts small routes on a test app that owns a real TenancyService backed
by SQLite, and exercises them through TestClient.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Annotated
from unittest.mock import MagicMock

import pytest
import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from infrastructure.settings import TenancySettings
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.services import TenancyService
from tenancy.dependencies import (
    create_tenancy_service,
    create_tenancy_service_from_settings,
    get_tenancy_service,
    get_tenant_connection,
    require_tenant,
    tenant_model,
)
from tenancy.domain.value_objects import ModelDefinition
from tenancy.infrastructure.connection_pool import TenantConnectionPool
from tenancy.infrastructure.schema_registry import SchemaRegistry
from tenancy.ports.connections import (
    ITenantConnection,
    ITenantConnectionPool,
    ITenantModel,
)
from tenancy.ports.options import TenancyModuleOptions


class SuspendedTenantValidator:
    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id

    async def validate(self) -> None:
        if self.tenant_id == "suspended":
            raise HTTPException(status_code=402, detail="Subscription expired")
        if self.tenant_id == "banned":
            raise PermissionError("banned")


def _build_app(service: TenancyService) -> FastAPI:
    app = FastAPI()
    app.state.tenancy = service

    @app.get("/whoami")
    async def whoami(
        request: Request,
        connection: Annotated[ITenantConnection, Depends(get_tenant_connection)],
    ) -> dict:
        return {
            "tenant_id": connection.tenant_id,
            "state_tenant_id": request.state.tenant_id,
            "log_tenant_id": structlog.contextvars.get_contextvars().get("tenant_id"),
        }

    @app.get("/cats")
    async def list_cats(
        cats: Annotated[ITenantModel, Depends(tenant_model("Cat"))],
    ) -> list:
        return await cats.find_all()

    @app.post("/cats")
    async def create_cat(
        cats: Annotated[ITenantModel, Depends(tenant_model("Cat"))],
    ) -> dict:
        return await cats.create({"name": "Tom", "age": 3})

    @app.get("/ghosts")
    async def list_ghosts(
        ghosts: Annotated[ITenantModel, Depends(tenant_model("Ghost"))],
    ) -> list:
        return await ghosts.find_all()

    @app.get("/guarded")
    async def guarded(
        tenant: Annotated[TenantContext, Depends(require_tenant)],
    ) -> dict:
        return {"tenant_id": tenant.tenant_id, "source": tenant.source}

    return app


@pytest.fixture
def service(
    sqlite_uri: Callable[[str], str],
    cat_definition: ModelDefinition,
) -> TenancyService:
    tenancy = create_tenancy_service(
        TenancyModuleOptions(
            uri=sqlite_uri,
            tenant_identifier="X-TENANT-ID",
            validator=SuspendedTenantValidator,
        ),
        connection_probe=MagicMock(),
        registry_probe=MagicMock(),
        service_probe=MagicMock(),
        context_probe=MagicMock(),
    )
    tenancy.register_models([cat_definition])
    return tenancy


@pytest.fixture
def client(service: TenancyService) -> Generator[TestClient, None, None]:
    with TestClient(_build_app(service)) as test_client:
        yield test_client
        test_client.portal.call(service.shutdown)


class TestGetTenancyService:
    """Tests for get_tenancy_service()."""

    def test_missing_service_raises(self) -> None:
        """Should fail loudly when the app has no tenancy service."""
        request = MagicMock()
        request.app.state = MagicMock(spec=[])

        with pytest.raises(RuntimeError, match="not initialized"):
            get_tenancy_service(request)


class TestGetTenantConnection:
    """Tests for get_tenant_connection()."""

    def test_resolves_from_header(self, client: TestClient) -> None:
        """Should resolve the tenant named by the header."""
        response = client.get("/whoami", headers={"X-TENANT-ID": "acme"})

        assert response.status_code == 200
        assert response.json() == {
            "tenant_id": "acme",
            "state_tenant_id": "acme",
            "log_tenant_id": "acme",
        }

    def test_missing_header_returns_400(self, client: TestClient) -> None:
        """Should reject requests without a tenant header."""
        response = client.get("/whoami")

        assert response.status_code == 400
        assert response.json()["detail"] == "X-TENANT-ID is not supplied"

    def test_validator_rejection_returns_403(self, client: TestClient) -> None:
        """Should reject tenants refused by the validator."""
        response = client.get("/whoami", headers={"X-TENANT-ID": "banned"})

        assert response.status_code == 403

    def test_validator_http_exception_is_preserved(self, client: TestClient) -> None:
        """Should return the validator's own HTTP error."""
        response = client.get("/whoami", headers={"X-TENANT-ID": "suspended"})

        assert response.status_code == 402
        assert response.json()["detail"] == "Subscription expired"

    def test_unreachable_database_returns_503(
        self,
        tmp_path,
        cat_definition: ModelDefinition,
    ) -> None:
        """Should report an unavailable tenant database."""
        missing = tmp_path / "missing" / "nested"
        service = create_tenancy_service(
            TenancyModuleOptions(
                uri=lambda t: f"sqlite+aiosqlite:///{missing}/{t}.db",
                tenant_identifier="X-TENANT-ID",
            ),
            connection_probe=MagicMock(),
            registry_probe=MagicMock(),
            service_probe=MagicMock(),
            context_probe=MagicMock(),
        )
        service.register_models([cat_definition])

        with TestClient(_build_app(service)) as test_client:
            response = test_client.get("/whoami", headers={"X-TENANT-ID": "acme"})

        assert response.status_code == 503
        assert len(service.pool) == 0


class TestTenantModel:
    """Tests for tenant_model() injection."""

    def test_injects_model_of_requesting_tenant(self, client: TestClient) -> None:
        """Should bind the model to the caller's tenant database."""
        created = client.post("/cats", headers={"X-TENANT-ID": "acme"})
        assert created.status_code == 200

        acme_cats = client.get("/cats", headers={"X-TENANT-ID": "acme"}).json()
        globex_cats = client.get("/cats", headers={"X-TENANT-ID": "globex"}).json()

        assert [cat["name"] for cat in acme_cats] == ["Tom"]
        assert globex_cats == []

    def test_unregistered_model_returns_500(self, client: TestClient) -> None:
        """Should fail when a route asks for a model nobody registered."""
        response = client.get("/ghosts", headers={"X-TENANT-ID": "acme"})

        assert response.status_code == 500
        assert "Ghost" in response.json()["detail"]


class TestRequireTenant:
    """Tests for require_tenant()."""

    def test_returns_tenant_context(self, client: TestClient) -> None:
        """Should hand the resolved tenant to the route."""
        response = client.get("/guarded", headers={"X-TENANT-ID": "acme"})

        assert response.status_code == 200
        assert response.json() == {"tenant_id": "acme", "source": "http"}

    def test_rejects_request_without_tenant(self, client: TestClient) -> None:
        """Should reject requests without a tenant."""
        response = client.get("/guarded")

        assert response.status_code == 400


class TestCreateTenancyServiceFromSettings:
    """Tests for create_tenancy_service_from_settings()."""

    def test_builds_options_from_settings(self, tmp_path) -> None:
        """Should derive URI, identifier and flags from settings."""
        settings = TenancySettings(
            _env_file=None,
            tenant_identifier="X-ORG",
            database_uri_template=f"sqlite+aiosqlite:///{tmp_path}/{{tenant_id}}.db",
            force_create_collections=True,
            connect_timeout_seconds=3,
            echo_sql=True,
        )

        service = create_tenancy_service_from_settings(settings)

        assert service.options.tenant_identifier == "X-ORG"
        assert service.options.force_create_collections is True
        assert service.options.connect_timeout == 3
        assert service.options.uri("acme") == f"sqlite+aiosqlite:///{tmp_path}/acme.db"
        assert service.options.options is not None
        assert service.options.options()["echo"] is True

    def test_wires_concrete_collaborators(self, tmp_path) -> None:
        """Should back the service with the SQLAlchemy implementations."""
        settings = TenancySettings(
            _env_file=None,
            tenant_identifier="X-ORG",
            database_uri_template=f"sqlite+aiosqlite:///{tmp_path}/{{tenant_id}}.db",
        )

        service = create_tenancy_service_from_settings(settings)

        assert isinstance(service.registry, SchemaRegistry)
        assert isinstance(service.pool, TenantConnectionPool)
        assert isinstance(service.pool, ITenantConnectionPool)
