from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from context import DomainContext
from dependencies import ADMIN, MANAGER, ensure_restaurant_access, get_context, require_roles
from schemas import Borne, BorneStatus

router = APIRouter(prefix="/bornes", tags=["Bornes"])


class BorneCreate(BaseModel):
    restaurant: str
    status: BorneStatus = "disabled"


class StatusUpdate(BaseModel):
    status: BorneStatus


def _get_borne(context: DomainContext, borne_id: str) -> dict:
    borne = context.bornes.find_by_id(borne_id)
    if not borne:
        raise HTTPException(status_code=404, detail="Borne not found")
    return borne


@router.post("/")
def create_borne(payload: BorneCreate,
                 employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                 context: DomainContext = Depends(get_context)):
    ensure_restaurant_access(employee, payload.restaurant)
    if not context.restaurants.find_by_id(payload.restaurant):
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return context.bornes.create(Borne(**payload.model_dump()))


@router.get("/")
def list_bornes(restaurant: Optional[str] = None, context: DomainContext = Depends(get_context)):
    if restaurant:
        return context.bornes.find_by_restaurant(restaurant)
    return context.bornes.find_many()


@router.get("/{borne_id}")
def get_borne(borne_id: str, context: DomainContext = Depends(get_context)):
    return _get_borne(context, borne_id)


@router.patch("/{borne_id}/status")
def update_borne_status(borne_id: str, payload: StatusUpdate,
                        employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                        context: DomainContext = Depends(get_context)):
    borne = _get_borne(context, borne_id)
    ensure_restaurant_access(employee, borne["restaurant"])
    return context.bornes.update_status(borne["_id"], payload.status)


@router.delete("/{borne_id}", status_code=204)
def delete_borne(borne_id: str,
                 employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                 context: DomainContext = Depends(get_context)):
    borne = _get_borne(context, borne_id)
    ensure_restaurant_access(employee, borne["restaurant"])
    context.bornes.delete_by_id(borne["_id"])
    return Response(status_code=204)
