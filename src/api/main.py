"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI

from animals.domain.models import MODEL_DEFINITIONS as ANIMAL_MODELS
from animals.presentation import routes as animal_routes
from dogs.domain.models import MODEL_DEFINITIONS as DOG_MODELS
from dogs.presentation import routes as dog_routes
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe, StartupProbe
from infrastructure.settings import get_settings, get_tenancy_settings
from infrastructure.version import __version__
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.services import TenancyService
from tenancy.dependencies import (
    create_tenancy_service_from_settings,
    get_tenant_connection,
    require_tenant,
)
from tenancy.domain.value_objects import ModelDefinition, model_names
from tenancy.ports.connections import ITenantConnection

FEATURE_MODELS: dict[str, list[ModelDefinition]] = {
    "animals": ANIMAL_MODELS,
    "dogs": DOG_MODELS,
}


def create_app(
    service: TenancyService | None = None,
    probe: StartupProbe | None = None,
) -> FastAPI:
    """Create the application.

    Args:
        service: Tenancy service to route with, built from the environment
            at startup when omitted
        probe: Optional startup probe
    """
    probe = probe or DefaultStartupProbe()

    @asynccontextmanager
    async def tenancy_lifespan(app: FastAPI):
        """Application lifespan context.

        Manages:
        - Logging configuration
        - Tenancy service creation and feature model registration
        - Tenant connection shutdown
        """
        configure_logging(debug=get_settings().debug)

        tenancy = service or create_tenancy_service_from_settings(
            get_tenancy_settings()
        )
        for feature, definitions in FEATURE_MODELS.items():
            tenancy.register_models(definitions)
            probe.feature_models_registered(
                feature=feature,
                models=model_names(definitions),
            )
        app.state.tenancy = tenancy

        yield

        probe.shutdown_started(open_connections=len(tenancy.pool))
        await tenancy.shutdown()
        probe.shutdown_completed()

    app = FastAPI(
        title=get_settings().app_name,
        description="Per-tenant database connection routing",
        version=__version__,
        lifespan=tenancy_lifespan,
    )

    app.include_router(animal_routes.router)
    app.include_router(dog_routes.router)

    @app.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.get("/health/db")
    async def health_db(
        tenant: Annotated[TenantContext, Depends(require_tenant)],
        connection: Annotated[ITenantConnection, Depends(get_tenant_connection)],
    ) -> dict:
        """Check the requesting tenant's database connection.

        Returns the connection status and its attached models.
        """
        try:
            await connection.ping()
        except Exception as e:
            return {
                "status": "error",
                "tenant_id": tenant.tenant_id,
                "error": str(e),
            }

        return {
            "status": "ok",
            "tenant_id": tenant.tenant_id,
            "models": sorted(connection.models),
        }

    return app


app = create_app()
