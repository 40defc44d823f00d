"""HTTP routes for the dogs feature."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from dogs.domain.models import Dog
from tenancy.dependencies import tenant_model
from tenancy.ports.connections import ITenantModel

router = APIRouter(prefix="/dogs", tags=["dogs"])


class CatCountResponse(BaseModel):
    count: int


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_dog(
    request: Dog,
    dogs: ITenantModel = Depends(tenant_model("Dog")),
) -> dict[str, Any]:
    return await dogs.create(request)


@router.get("")
async def list_dogs(
    dogs: ITenantModel = Depends(tenant_model("Dog")),
) -> list[dict[str, Any]]:
    return await dogs.find_all()


@router.get("/count_cats")
async def count_cats(
    maine_coons: ITenantModel = Depends(tenant_model("MaineCoon")),
) -> CatCountResponse:
    """Count the tenant's Maine Coons, registered by the animals feature."""
    return CatCountResponse(count=await maine_coons.count())
