from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from dependencies import ADMIN, MANAGER, get_context, require_roles
from schemas import Category

router = APIRouter(prefix="/categories", tags=["Categories"])

staff_only = [Depends(require_roles(MANAGER, ADMIN))]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    promotion: Optional[str] = None


class PromotionRef(BaseModel):
    promotion_id: str


@router.post("/", dependencies=staff_only)
def create_category(payload: CategoryCreate, context: DomainContext = Depends(get_context)):
    if payload.promotion and not context.promotions.find_by_id(payload.promotion):
        raise HTTPException(status_code=404, detail="Promotion not found")
    return context.categories.create(Category(**payload.model_dump()))


@router.get("/")
def list_categories(context: DomainContext = Depends(get_context)):
    return context.categories.find_many(sort=[("name", 1)])


@router.get("/{category_id}")
def get_category(category_id: str, context: DomainContext = Depends(get_context)):
    category = context.categories.find_with_products(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("/{category_id}/products")
def get_category_products(category_id: str, context: DomainContext = Depends(get_context)):
    category = context.categories.find_with_products(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category["products"]


@router.patch("/{category_id}/promotion", dependencies=staff_only)
def update_category_promotion(category_id: str, payload: PromotionRef,
                              context: DomainContext = Depends(get_context)):
    if not context.promotions.find_by_id(payload.promotion_id):
        raise HTTPException(status_code=404, detail="Promotion not found")
    category = context.categories.update_promotion(category_id, payload.promotion_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/{category_id}/products/{product_id}", dependencies=staff_only)
def remove_category_product(category_id: str, product_id: str, context: DomainContext = Depends(get_context)):
    category = context.categories.remove_product(category_id, product_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return context.categories.find_with_products(category_id)


@router.delete("/{category_id}", status_code=204, dependencies=staff_only)
def delete_category(category_id: str, context: DomainContext = Depends(get_context)):
    if not context.categories.delete_by_id(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return Response(status_code=204)
