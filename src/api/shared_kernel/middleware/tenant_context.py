"""Tenant context value object for resolved tenant identification.

This module contains the pure value object that represents a resolved
tenant context. It is framework-agnostic and contains no business logic,
making it safe for the shared kernel.

The resolution logic (extraction, validation, connection lookup) lives in
the Tenancy bounded context.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for the current call.

    Attributes:
        tenant_id: The extracted tenant identifier.
        source: Kind of call the tenant was resolved from: 'http', 'rpc'
            or 'ws'.
    """

    tenant_id: str
    source: str
