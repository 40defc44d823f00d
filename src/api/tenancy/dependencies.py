"""Dependency injection for the Tenancy bounded context.

Wires the SQLAlchemy backed infrastructure into the tenancy service,
resolves the tenant connection of an HTTP request and hands feature
routes the tenant-bound models they declare.

Usage in FastAPI routes:
    @router.get("/dogs")
    async def list_dogs(
        dogs: Annotated[ITenantModel, Depends(tenant_model("Dog"))],
    ):
        return await dogs.find_all()
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Annotated, Any

import structlog
from fastapi import Depends, HTTPException, Request, status

from infrastructure.database.models import CollectionCatalog
from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)
from infrastructure.settings import TenancySettings
from shared_kernel.middleware.observability import TenantContextProbe
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.observability import TenancyServiceProbe
from tenancy.application.services import TenancyService
from tenancy.domain.value_objects import HttpRequestContext
from tenancy.infrastructure.connection_pool import TenantConnectionPool
from tenancy.infrastructure.observability import SchemaRegistryProbe
from tenancy.infrastructure.provisioner import ConnectionProvisioner
from tenancy.infrastructure.schema_registry import SchemaRegistry
from tenancy.ports.connections import ITenantConnection, ITenantModel
from tenancy.ports.exceptions import ModelNotRegisteredError, TenancyError
from tenancy.ports.options import TenancyModuleOptions
from tenancy.ports.protocols import ValidatorFactory
from tenancy.presentation.errors import to_http_exception


def create_tenancy_service(
    options: TenancyModuleOptions,
    *,
    connection_probe: ConnectionProbe | None = None,
    registry_probe: SchemaRegistryProbe | None = None,
    service_probe: TenancyServiceProbe | None = None,
    context_probe: TenantContextProbe | None = None,
) -> TenancyService:
    """Build a tenancy service backed by SQLAlchemy connections.

    Args:
        options: Tenancy options supplied by the host application
        connection_probe: Probe for connection lifecycle events
        registry_probe: Probe for model registration events
        service_probe: Probe for registration replay events
        context_probe: Probe for tenant resolution events
    """
    connection_probe = connection_probe or DefaultConnectionProbe()
    return TenancyService(
        options,
        registry=SchemaRegistry(probe=registry_probe),
        pool=TenantConnectionPool(probe=connection_probe),
        provisioner=ConnectionProvisioner(
            options,
            catalog=CollectionCatalog(),
            probe=connection_probe,
        ),
        probe=service_probe,
        context_probe=context_probe,
    )


def create_tenancy_service_from_settings(
    settings: TenancySettings,
    validator: ValidatorFactory | None = None,
    **kwargs: Any,
) -> TenancyService:
    """Build the tenancy service from environment driven settings.

    Args:
        settings: Tenancy settings (URI template, identifier source, flags)
        validator: Optional validator factory, not expressible in settings
        **kwargs: Probes forwarded to ``create_tenancy_service``
    """
    engine_options: dict[str, Any] = {
        "echo": settings.echo_sql,
        "pool_recycle": settings.pool_recycle_seconds,
    }

    def build_options() -> Mapping[str, Any]:
        return engine_options

    options = TenancyModuleOptions(
        uri=settings.build_uri,
        tenant_identifier=settings.tenant_identifier,
        is_tenant_from_subdomain=settings.is_tenant_from_subdomain,
        options=build_options,
        validator=validator,
        force_create_collections=settings.force_create_collections,
        connect_timeout=settings.connect_timeout_seconds,
    )
    return create_tenancy_service(options, **kwargs)


def get_tenancy_service(request: Request) -> TenancyService:
    """Get the tenancy service owned by the running application.

    Raises:
        RuntimeError: If the application was started without one.
    """
    service = getattr(request.app.state, "tenancy", None)
    if service is None:
        raise RuntimeError(
            "TenancyService not initialized. Ensure app lifespan has started."
        )
    return service


async def get_tenant_connection(
    request: Request,
    service: Annotated[TenancyService, Depends(get_tenancy_service)],
) -> ITenantConnection:
    """Resolve the tenant connection serving this request.

    The resolved tenant is recorded on ``request.state`` and bound into the
    structlog context so every later log event of the request carries it.

    Raises:
        HTTPException 400: If the tenant identifier is missing or not configured.
        HTTPException 403: If the validator rejects the tenant.
        HTTPException 503: If the tenant connection cannot be opened.
    """
    context = HttpRequestContext(
        headers=dict(request.headers),
        host=request.headers.get("host"),
    )
    try:
        tenant, connection = await service.resolve_tenant(context)
    except TenancyError as e:
        raise to_http_exception(e) from e

    request.state.tenant_id = tenant.tenant_id
    request.state.tenant = tenant
    structlog.contextvars.bind_contextvars(tenant_id=tenant.tenant_id)
    return connection


def tenant_model(name: str) -> Callable[[ITenantConnection], ITenantModel]:
    """Build a dependency injecting the named model of the request's tenant.

    Args:
        name: Registered model or discriminator name (e.g. "Beagle")
    """

    def dependency(
        connection: Annotated[ITenantConnection, Depends(get_tenant_connection)],
    ) -> ITenantModel:
        try:
            return connection.get_model(name)
        except ModelNotRegisteredError as e:
            raise to_http_exception(e) from e

    dependency.__name__ = f"tenant_model_{name}"
    return dependency


def require_tenant(
    request: Request,
    connection: Annotated[ITenantConnection, Depends(get_tenant_connection)],
) -> TenantContext:
    """Guard requiring a resolved tenant on the request.

    Returns:
        The tenant context of the request.

    Raises:
        HTTPException 400: If no tenant was resolved for the request.
    """
    tenant = getattr(request.state, "tenant", None)
    if tenant is None or tenant.tenant_id != connection.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tenant ID is mandatory",
        )
    return tenant
