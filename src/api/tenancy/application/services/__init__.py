"""Application services for the Tenancy bounded context."""

from tenancy.application.services.tenancy_service import TenancyService

__all__ = ["TenancyService"]
