import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from database import rollback_on_error
from dependencies import (
    ADMIN,
    DELIVERYMAN,
    MANAGER,
    PREPARER,
    Principal,
    ensure_restaurant_access,
    ensure_self_or_staff,
    get_context,
    get_principal,
    require_roles,
)
from schemas import Order, OrderItem, OrderStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


class OrderCreate(BaseModel):
    restaurant: str
    items: List[OrderItem] = Field(..., min_length=1)
    customer: Optional[str] = None
    promotion: Optional[str] = None


class StatusUpdate(BaseModel):
    status: OrderStatus


class EmployeeRef(BaseModel):
    employee_id: str


def _get_order(context: DomainContext, order_id: str) -> dict:
    order = context.orders.find_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _check_items(context: DomainContext, items: List[OrderItem]) -> None:
    for line in items:
        repository = context.products if line.type == "product" else context.menus
        if not repository.find_by_id(line.item):
            raise HTTPException(status_code=404, detail=f"{line.type.capitalize()} {line.item} not found")


@router.post("/")
def create_order(payload: OrderCreate, principal: Principal = Depends(get_principal),
                 context: DomainContext = Depends(get_context)):
    if principal.customer:
        customer_id = principal.customer["_id"]
    elif principal.employee and payload.customer:
        customer_id = payload.customer
        if not context.customers.find_by_id(customer_id):
            raise HTTPException(status_code=404, detail="Customer not found")
    else:
        raise HTTPException(status_code=400, detail="An order needs a customer")

    if not context.restaurants.find_by_id(payload.restaurant):
        raise HTTPException(status_code=404, detail="Restaurant not found")
    if payload.promotion and not context.promotions.find_by_id(payload.promotion):
        raise HTTPException(status_code=404, detail="Promotion not found")
    _check_items(context, payload.items)

    with rollback_on_error() as undo:
        order = context.orders.create(Order(
            customer=customer_id,
            restaurant=payload.restaurant,
            items=payload.items,
            promotion=payload.promotion,
        ))
        undo.append(lambda: context.orders.delete_by_id(order["_id"]))
        if not context.customers.add_order(customer_id, order["_id"]):
            raise HTTPException(status_code=404, detail="Customer not found")
    logger.info("Order %s placed by customer %s", order["_id"], customer_id)
    return order


@router.get("/")
def list_orders(restaurant: Optional[str] = None,
                employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                context: DomainContext = Depends(get_context)):
    if restaurant:
        ensure_restaurant_access(employee, restaurant)
        return context.orders.find_by_restaurant(restaurant)
    if employee["role"] == ADMIN.value:
        return context.orders.find_many(sort=[("created_at", -1)])
    return context.orders.find_by_restaurant(employee.get("restaurant"))


@router.get("/{order_id}")
def get_order(order_id: str, principal: Principal = Depends(get_principal),
              context: DomainContext = Depends(get_context)):
    order = _get_order(context, order_id)
    ensure_self_or_staff(principal, order["customer"])
    return order


def _get_staff_order(context: DomainContext, employee: dict, order_id: str) -> dict:
    """The order, provided ``employee`` works for its restaurant or is delivering it."""
    order = _get_order(context, order_id)
    if employee["role"] == DELIVERYMAN.value and order.get("delivery_man") == employee["_id"]:
        return order
    ensure_restaurant_access(employee, order["restaurant"])
    return order


@router.patch("/{order_id}/status")
def update_order_status(order_id: str, payload: StatusUpdate,
                        employee: dict = Depends(require_roles(ADMIN, MANAGER, PREPARER, DELIVERYMAN)),
                        context: DomainContext = Depends(get_context)):
    order = _get_staff_order(context, employee, order_id)
    return context.orders.update_status(order["_id"], payload.status)


@router.patch("/{order_id}/preparer")
def update_order_preparer(order_id: str, payload: EmployeeRef,
                          employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                          context: DomainContext = Depends(get_context)):
    order = _get_staff_order(context, employee, order_id)
    if not context.employees.find_by_id(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return context.orders.update_preparer(order["_id"], payload.employee_id)


@router.delete("/{order_id}", status_code=204)
def delete_order(order_id: str,
                 employee: dict = Depends(require_roles(ADMIN, MANAGER)),
                 context: DomainContext = Depends(get_context)):
    order = _get_staff_order(context, employee, order_id)
    context.orders.delete_by_id(order["_id"])
    context.customers.remove_order(order["customer"], order["_id"])
    return Response(status_code=204)
