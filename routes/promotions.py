from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, model_validator

from context import DomainContext
from dependencies import ADMIN, MANAGER, ensure_restaurant_access, get_context, require_roles
from schemas import Promotion, PromotionType

router = APIRouter(prefix="/promotions", tags=["Promotions"])


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PromotionCreate(BaseModel):
    type: PromotionType
    value: float = Field(..., ge=0)
    start_date: datetime
    end_date: datetime
    conditions: Optional[str] = None
    restaurant: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self):
        self.start_date = _as_utc(self.start_date)
        self.end_date = _as_utc(self.end_date)
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.type == "percentage" and self.value > 100:
            raise ValueError("percentage promotions cannot exceed 100")
        return self


def _check_restaurant(context: DomainContext, employee: dict, restaurant_id: Optional[str]) -> None:
    if not restaurant_id:
        return
    ensure_restaurant_access(employee, restaurant_id)
    if not context.restaurants.find_by_id(restaurant_id):
        raise HTTPException(status_code=404, detail="Restaurant not found")


@router.post("/")
def create_promotion(payload: PromotionCreate,
                     employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                     context: DomainContext = Depends(get_context)):
    _check_restaurant(context, employee, payload.restaurant)
    return context.promotions.create(Promotion(**payload.model_dump(), responsible=employee["_id"]))


@router.get("/")
def list_promotions(active: bool = False, context: DomainContext = Depends(get_context)):
    if active:
        return context.promotions.find_active()
    return context.promotions.find_many(sort=[("start_date", -1)])


@router.get("/{promotion_id}")
def get_promotion(promotion_id: str, context: DomainContext = Depends(get_context)):
    promotion = context.promotions.find_by_id(promotion_id)
    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")
    return promotion


def _get_owned_promotion(context: DomainContext, employee: dict, promotion_id: str) -> dict:
    """The stored promotion, provided ``employee`` may manage it."""
    promotion = context.promotions.find_by_id(promotion_id)
    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")
    if promotion.get("restaurant"):
        ensure_restaurant_access(employee, promotion["restaurant"])
    elif employee.get("role") != ADMIN.value and promotion.get("responsible") != employee["_id"]:
        # promotions without a restaurant belong to whoever created them
        raise HTTPException(status_code=403, detail="Forbidden")
    return promotion


@router.put("/{promotion_id}")
def update_promotion(promotion_id: str, payload: PromotionCreate,
                     employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                     context: DomainContext = Depends(get_context)):
    promotion = _get_owned_promotion(context, employee, promotion_id)
    _check_restaurant(context, employee, payload.restaurant)
    fields = payload.model_dump()
    if fields["restaurant"] is None:
        fields["restaurant"] = promotion.get("restaurant")
    return context.promotions.update_promotion(promotion["_id"], fields)


@router.delete("/{promotion_id}", status_code=204)
def delete_promotion(promotion_id: str,
                     employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                     context: DomainContext = Depends(get_context)):
    promotion = _get_owned_promotion(context, employee, promotion_id)
    context.promotions.delete_by_id(promotion["_id"])
    return Response(status_code=204)
