"""Domain-Oriented Observability for the Tenancy application layer."""

from tenancy.application.observability.tenancy_service_probe import (
    DefaultTenancyServiceProbe,
    TenancyServiceProbe,
)

__all__ = [
    "DefaultTenancyServiceProbe",
    "TenancyServiceProbe",
]
