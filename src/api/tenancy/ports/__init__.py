"""Ports for the Tenancy bounded context: exceptions, options and contracts."""

from tenancy.ports.connections import (
    ConnectionFactory,
    IConnectionProvisioner,
    ISchemaRegistry,
    ITenantConnection,
    ITenantConnectionPool,
    ITenantModel,
)
from tenancy.ports.exceptions import (
    MissingTenantConfigError,
    MissingTenantIdentifierError,
    ModelNotRegisteredError,
    TenancyError,
    TenantConnectionError,
    TenantConnectionTimeoutError,
    TenantValidationError,
)
from tenancy.ports.options import TenancyModuleOptions
from tenancy.ports.protocols import (
    OptionsBuilder,
    TenancyValidator,
    UriBuilder,
    ValidatorFactory,
)

__all__ = [
    "ConnectionFactory",
    "IConnectionProvisioner",
    "ISchemaRegistry",
    "ITenantConnection",
    "ITenantConnectionPool",
    "ITenantModel",
    "MissingTenantConfigError",
    "MissingTenantIdentifierError",
    "ModelNotRegisteredError",
    "OptionsBuilder",
    "TenancyError",
    "TenancyModuleOptions",
    "TenancyValidator",
    "TenantConnectionError",
    "TenantConnectionTimeoutError",
    "TenantValidationError",
    "UriBuilder",
    "ValidatorFactory",
]
