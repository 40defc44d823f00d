"""Value objects for the Tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for tenant identifiers, model definitions and the
inbound call contexts a tenant is extracted from.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel

DEFAULT_DISCRIMINATOR_KEY = "kind"


@dataclass(frozen=True)
class TenantId:
    """Identifier of a tenant, the key of every connection lookup.

    Opaque, never empty.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from a raw string.

        Surrounding whitespace is stripped.

        Args:
            value: Raw tenant identifier

        Returns:
            TenantId instance

        Raises:
            ValueError: If the value is empty after stripping
        """
        stripped = value.strip()
        if not stripped:
            raise ValueError("TenantId must not be empty")
        return cls(value=stripped)


@dataclass(frozen=True)
class Discriminator:
    """A named sub-schema stored in its base model's collection.

    Documents created through a discriminator are tagged with ``value``
    (the discriminator name when no value is given).

    Attributes:
        name: Model name of the sub-schema (e.g. "Beagle")
        schema: Pydantic model validating the sub-schema's documents
        value: Tag written to the base model's discriminator key
    """

    name: str
    schema: type[BaseModel]
    value: str | int | None = None

    @property
    def tag(self) -> str:
        """The stored tag for documents of this discriminator."""
        return str(self.value) if self.value is not None else self.name


def _default_collection(name: str) -> str:
    lowered = name.lower()
    if lowered.endswith(("s", "x", "z", "ch", "sh")):
        return f"{lowered}es"
    if lowered.endswith("y") and lowered[-2:-1] not in ("a", "e", "i", "o", "u"):
        return f"{lowered[:-1]}ies"
    return f"{lowered}s"


@dataclass(frozen=True)
class ModelDefinition:
    """Definition of a model registered by a feature module.

    Attributes:
        name: Unique model name, the registry key
        schema: Pydantic model validating the base documents
        collection: Collection name (defaults to the pluralised, lower-cased name)
        discriminators: Sub-schemas sharing this model's collection
        discriminator_key: Document field holding the discriminator tag
    """

    name: str
    schema: type[BaseModel]
    collection: str | None = None
    discriminators: tuple[Discriminator, ...] = ()
    discriminator_key: str = DEFAULT_DISCRIMINATOR_KEY

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("ModelDefinition name must not be empty")
        # Accept any sequence, store an immutable tuple
        object.__setattr__(self, "discriminators", tuple(self.discriminators))

    @property
    def collection_name(self) -> str:
        """The collection this model (and its discriminators) is stored in."""
        return self.collection or _default_collection(self.name)


class ContextKind(StrEnum):
    """Kind of inbound call a tenant identifier is extracted from."""

    HTTP = "http"
    RPC = "rpc"
    EVENT = "ws"


@dataclass(frozen=True)
class HttpRequestContext:
    """Normalized HTTP request: headers and host.

    Header names are stored lower-cased so lookups are case-insensitive.
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    host: str | None = None
    kind: Literal[ContextKind.HTTP] = field(default=ContextKind.HTTP, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "headers",
            {name.lower(): value for name, value in self.headers.items()},
        )

    def header(self, name: str) -> str | None:
        """Get a header value by case-insensitive name."""
        return self.headers.get(name.lower())

    @property
    def effective_host(self) -> str:
        """The request host, falling back to the Host header."""
        return self.host or self.header("host") or ""


@dataclass(frozen=True)
class RpcRequestContext:
    """Normalized RPC message: message pattern and payload."""

    pattern: Any
    data: Mapping[str, Any] = field(default_factory=dict)
    kind: Literal[ContextKind.RPC] = field(default=ContextKind.RPC, init=False)


@dataclass(frozen=True)
class EventRequestContext:
    """Normalized event/websocket message: the raw payload."""

    payload: Mapping[str, Any] = field(default_factory=dict)
    kind: Literal[ContextKind.EVENT] = field(default=ContextKind.EVENT, init=False)


RequestContext = HttpRequestContext | RpcRequestContext | EventRequestContext


def model_names(definitions: Sequence[ModelDefinition]) -> list[str]:
    """List every model name a set of definitions binds, discriminators included."""
    names: list[str] = []
    for definition in definitions:
        names.append(definition.name)
        names.extend(d.name for d in definition.discriminators)
    return names
