"""Protocols for collaborators supplied by the host application.

The host decides where a tenant's database lives, how the driver is tuned
and whether a tenant is allowed in at all. These contracts keep the
tenancy core independent of those decisions.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

UriBuilder = Callable[[str], "str | Awaitable[str]"]
"""Maps a tenant id to its database URL, sync or async."""

OptionsBuilder = Callable[[], "Mapping[str, Any] | Awaitable[Mapping[str, Any]]"]
"""Returns driver specific engine options, sync or async."""


@runtime_checkable
class TenancyValidator(Protocol):
    """Gate deciding whether a tenant may be served.

    Created per call by the configured validator factory with the extracted
    tenant id. ``validate`` must raise to reject the tenant.
    """

    async def validate(self) -> None:
        """Validate the tenant, raising any exception to reject it."""
        ...


ValidatorFactory = Callable[[str], TenancyValidator]
"""Builds the validator for a tenant id."""
