import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from database import rollback_on_error
from dependencies import ADMIN, MANAGER, get_context, require_roles
from schemas import Product

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    category: str
    promotion: Optional[str] = None


class PromotionRef(BaseModel):
    promotion_id: str


@router.post("/", dependencies=[Depends(require_roles(ADMIN))])
def create_product(payload: ProductCreate, context: DomainContext = Depends(get_context)):
    if not context.categories.find_by_id(payload.category):
        raise HTTPException(status_code=404, detail="Category not found")
    if payload.promotion and not context.promotions.find_by_id(payload.promotion):
        raise HTTPException(status_code=404, detail="Promotion not found")
    if context.products.find_by_name(payload.name):
        raise HTTPException(status_code=409, detail="Product name already used")

    with rollback_on_error() as undo:
        product = context.products.create(Product(**payload.model_dump()))
        undo.append(lambda: context.products.delete_by_id(product["_id"]))
        if not context.categories.add_product(payload.category, product["_id"]):
            # category removed between the check and the update
            raise HTTPException(status_code=404, detail="Category not found")

    logger.info("Created product %s in category %s", product["name"], payload.category)
    return {"product": product, "category": context.categories.find_with_products(payload.category)}


@router.get("/")
def list_products(category: Optional[str] = None, context: DomainContext = Depends(get_context)):
    if category:
        return context.products.find_by_category(category)
    return context.products.find_many(sort=[("name", 1)])


@router.get("/{product_id}")
def get_product(product_id: str, context: DomainContext = Depends(get_context)):
    product = context.products.find_with_promotion(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.patch("/{product_id}/promotion", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
def update_product_promotion(product_id: str, payload: PromotionRef,
                             context: DomainContext = Depends(get_context)):
    if not context.promotions.find_by_id(payload.promotion_id):
        raise HTTPException(status_code=404, detail="Promotion not found")
    product = context.products.update_promotion(product_id, payload.promotion_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}/promotion", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
def remove_product_promotion(product_id: str, context: DomainContext = Depends(get_context)):
    product = context.products.remove_promotion(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", status_code=204, dependencies=[Depends(require_roles(ADMIN))])
def delete_product(product_id: str, context: DomainContext = Depends(get_context)):
    product = context.products.delete_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    context.categories.remove_product(product["category"], product["_id"])
    return Response(status_code=204)
