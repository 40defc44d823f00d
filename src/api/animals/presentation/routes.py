"""HTTP routes for the animals feature.

Every route runs against the collection of the requesting tenant.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ValidationError

from animals.domain.models import AnimalType
from tenancy.dependencies import tenant_model
from tenancy.ports.connections import ITenantModel

router = APIRouter(prefix="/animals", tags=["animals"])


class CreateAnimalRequest(BaseModel):
    """Body of a new animal, either a Beagle or a Maine Coon."""

    animal_type: AnimalType
    name: str
    age: int
    breed: str
    is_good: bool | None = None
    is_majestic: bool | None = None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_animal(
    request: CreateAnimalRequest,
    beagles: ITenantModel = Depends(tenant_model(AnimalType.BEAGLE.value)),
    maine_coons: ITenantModel = Depends(tenant_model(AnimalType.MAINE_COON.value)),
) -> dict[str, Any]:
    """Store an animal in the model matching its ``animal_type``.

    Raises:
        HTTPException: 422 if the fields do not match the animal type.
    """
    match request.animal_type:
        case AnimalType.BEAGLE:
            model = beagles
        case AnimalType.MAINE_COON:
            model = maine_coons

    try:
        return await model.create(request.model_dump(exclude_none=True))
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=e.errors(include_url=False, include_context=False),
        ) from e


@router.get("")
async def list_animals(
    beagles: ITenantModel = Depends(tenant_model(AnimalType.BEAGLE.value)),
    maine_coons: ITenantModel = Depends(tenant_model(AnimalType.MAINE_COON.value)),
) -> list[dict[str, Any]]:
    """List the tenant's Maine Coons followed by its Beagles."""
    cats, dogs = await asyncio.gather(maine_coons.find_all(), beagles.find_all())
    return [*cats, *dogs]


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_animals(
    beagles: ITenantModel = Depends(tenant_model(AnimalType.BEAGLE.value)),
    maine_coons: ITenantModel = Depends(tenant_model(AnimalType.MAINE_COON.value)),
) -> None:
    """Remove every animal of the tenant."""
    await maine_coons.delete_many()
    await beagles.delete_many()
