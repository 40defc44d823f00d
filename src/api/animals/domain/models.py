"""Animal documents and their tenancy model definitions.

Beagles and Maine Coons are both stored in the ``animals`` collection,
told apart by their ``animal_type``.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from tenancy.domain.value_objects import Discriminator, ModelDefinition


class AnimalType(StrEnum):
    """Discriminator values of the animals collection."""

    BEAGLE = "Beagle"
    MAINE_COON = "MaineCoon"


class Animal(BaseModel):
    name: str
    age: int
    breed: str


class Beagle(Animal):
    is_good: bool


class MaineCoon(Animal):
    is_majestic: bool


ANIMAL_DEFINITION = ModelDefinition(
    name="Animal",
    schema=Animal,
    collection="animals",
    discriminator_key="animal_type",
    discriminators=(
        Discriminator(name=AnimalType.BEAGLE.value, schema=Beagle),
        Discriminator(name=AnimalType.MAINE_COON.value, schema=MaineCoon),
    ),
)

MODEL_DEFINITIONS = [ANIMAL_DEFINITION]
