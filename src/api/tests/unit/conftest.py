"""Unit test fixtures with mocked dependencies."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from infrastructure.observability.probes import ConnectionProbe
from tenancy.domain.value_objects import Discriminator, ModelDefinition
from tenancy.ports.options import TenancyModuleOptions


class Cat(BaseModel):
    name: str
    age: int


class Pet(BaseModel):
    name: str


class Parrot(Pet):
    can_talk: bool


class Hamster(Pet):
    wheel_size: int


@pytest.fixture
def sqlite_uri(tmp_path: Path) -> Callable[[str], str]:
    """Build a file-backed SQLite URL per tenant inside the test directory."""

    def build(tenant_id: str) -> str:
        return f"sqlite+aiosqlite:///{tmp_path}/tenant-{tenant_id}.db"

    return build


@pytest.fixture
def tenancy_options(sqlite_uri: Callable[[str], str]) -> TenancyModuleOptions:
    """Header based options pointing every tenant at its own SQLite file."""
    return TenancyModuleOptions(uri=sqlite_uri, tenant_identifier="X-TENANT-ID")


@pytest.fixture
def mock_connection_probe() -> MagicMock:
    """Create a mock connection probe."""
    return MagicMock(spec=ConnectionProbe)


@pytest.fixture
def cat_definition() -> ModelDefinition:
    """A plain model without discriminators."""
    return ModelDefinition(name="Cat", schema=Cat)


@pytest.fixture
def pet_definition() -> ModelDefinition:
    """A base model with two discriminators sharing its collection."""
    return ModelDefinition(
        name="Pet",
        schema=Pet,
        collection="pets",
        discriminators=(
            Discriminator(name="Parrot", schema=Parrot),
            Discriminator(name="Hamster", schema=Hamster, value="hamster"),
        ),
    )
