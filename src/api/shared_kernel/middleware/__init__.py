"""Shared middleware for cross-cutting concerns.

Holds the resolved tenant context value object and its observability
probe, shared by every feature that routes calls to tenant databases.
"""

from shared_kernel.middleware.tenant_context import TenantContext

__all__ = ["TenantContext"]
