"""Dog documents and their tenancy model definition."""

from __future__ import annotations

from pydantic import BaseModel

from tenancy.domain.value_objects import ModelDefinition


class Dog(BaseModel):
    name: str
    age: int
    breed: str


MODEL_DEFINITIONS = [ModelDefinition(name="Dog", schema=Dog)]
