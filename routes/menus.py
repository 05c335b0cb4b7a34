from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from dependencies import ADMIN, MANAGER, get_context, require_roles
from schemas import Menu

router = APIRouter(prefix="/menus", tags=["Menus"])

staff_only = [Depends(require_roles(MANAGER, ADMIN))]


class MenuCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    products: List[str] = []


class ProductRef(BaseModel):
    product_id: str


class PromotionRef(BaseModel):
    promotion_id: str


def _menu_or_404(menu):
    if not menu:
        raise HTTPException(status_code=404, detail="Menu not found")
    return menu


@router.post("/", dependencies=staff_only)
def create_menu(payload: MenuCreate, context: DomainContext = Depends(get_context)):
    found = context.products.find_by_ids(payload.products)
    if len(found) != len(payload.products):
        raise HTTPException(status_code=404, detail="Product not found")
    menu = context.menus.create(Menu(**payload.model_dump()))
    return context.menus.find_with_products(menu["_id"])


@router.get("/")
def list_menus(context: DomainContext = Depends(get_context)):
    return context.menus.find_many(sort=[("name", 1)])


@router.get("/{menu_id}")
def get_menu(menu_id: str, context: DomainContext = Depends(get_context)):
    return _menu_or_404(context.menus.find_with_products(menu_id))


@router.post("/{menu_id}/products", dependencies=staff_only)
def add_menu_product(menu_id: str, payload: ProductRef, context: DomainContext = Depends(get_context)):
    if not context.products.find_by_id(payload.product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    _menu_or_404(context.menus.add_product(menu_id, payload.product_id))
    return context.menus.find_with_products(menu_id)


@router.delete("/{menu_id}/products/{product_id}", dependencies=staff_only)
def remove_menu_product(menu_id: str, product_id: str, context: DomainContext = Depends(get_context)):
    _menu_or_404(context.menus.remove_product(menu_id, product_id))
    return context.menus.find_with_products(menu_id)


@router.post("/{menu_id}/promotion", dependencies=staff_only)
def add_menu_promotion(menu_id: str, payload: PromotionRef, context: DomainContext = Depends(get_context)):
    if not context.promotions.find_by_id(payload.promotion_id):
        raise HTTPException(status_code=404, detail="Promotion not found")
    _menu_or_404(context.menus.update_promotion(menu_id, payload.promotion_id))
    return context.menus.find_with_products(menu_id)


@router.delete("/{menu_id}", status_code=204, dependencies=staff_only)
def delete_menu(menu_id: str, context: DomainContext = Depends(get_context)):
    _menu_or_404(context.menus.delete_by_id(menu_id))
    return Response(status_code=204)
