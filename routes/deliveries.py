import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from dependencies import (
    ADMIN,
    DELIVERYMAN,
    MANAGER,
    Principal,
    ensure_restaurant_access,
    ensure_self_or_staff,
    get_context,
    get_principal,
    require_roles,
)
from dispatch import assign_courier
from schemas import Delivery, DeliveryStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deliveries", tags=["Deliveries"])

staff_only = [Depends(require_roles(ADMIN, MANAGER))]


class DeliveryCreate(BaseModel):
    order: str
    address: str = Field(..., min_length=1)
    estimated_delivery: datetime
    employee: Optional[str] = None


class StatusUpdate(BaseModel):
    status: DeliveryStatus


class EmployeeRef(BaseModel):
    employee_id: str


class EstimateUpdate(BaseModel):
    estimated_delivery: datetime


def _get_delivery(context: DomainContext, delivery_id: str) -> dict:
    delivery = context.deliveries.find_by_id(delivery_id)
    if not delivery:
        raise HTTPException(status_code=404, detail="Delivery not found")
    return delivery


def _get_courier(context: DomainContext, employee_id: str) -> dict:
    employee = context.employees.find_by_id(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    if employee.get("role") != DELIVERYMAN.value:
        raise HTTPException(status_code=400, detail="Employee is not a deliveryman")
    return employee


@router.post("/", dependencies=staff_only)
def create_delivery(payload: DeliveryCreate, context: DomainContext = Depends(get_context)):
    order = context.orders.find_by_id(payload.order)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if context.deliveries.find_by_order(order["_id"]):
        raise HTTPException(status_code=409, detail="Order already has a delivery")
    courier = _get_courier(context, payload.employee) if payload.employee else None

    delivery = context.deliveries.create(Delivery(
        address=payload.address,
        order=order["_id"],
        customer=order["customer"],
        employee=courier["_id"] if courier else None,
        estimated_delivery=payload.estimated_delivery,
    ))
    if courier:
        context.orders.update_delivery_man(order["_id"], courier["_id"])
        logger.info("Delivery %s handed to courier %s", delivery["_id"], courier["_id"])
        return delivery
    # no courier named: hand it to the closest one, or leave it unassigned
    return assign_courier(context, delivery) or delivery


@router.get("/{delivery_id}")
def get_delivery(delivery_id: str, principal: Principal = Depends(get_principal),
                 context: DomainContext = Depends(get_context)):
    delivery = _get_delivery(context, delivery_id)
    ensure_self_or_staff(principal, delivery["customer"])
    return delivery


@router.post("/{delivery_id}/assign", dependencies=staff_only)
def assign_delivery(delivery_id: str, context: DomainContext = Depends(get_context)):
    delivery = assign_courier(context, _get_delivery(context, delivery_id))
    if not delivery:
        raise HTTPException(status_code=404, detail="No courier available")
    return delivery


@router.patch("/{delivery_id}/status")
def update_delivery_status(delivery_id: str, payload: StatusUpdate,
                           employee: dict = Depends(require_roles(ADMIN, MANAGER, DELIVERYMAN)),
                           context: DomainContext = Depends(get_context)):
    delivery = _get_delivery(context, delivery_id)
    if employee["role"] == DELIVERYMAN.value:
        if delivery.get("employee") != employee["_id"]:
            raise HTTPException(status_code=403, detail="Forbidden")
    elif employee["role"] != ADMIN.value:
        order = context.orders.find_by_id(delivery["order"])
        ensure_restaurant_access(employee, order["restaurant"] if order else None)
    return context.deliveries.update_status(delivery["_id"], payload.status)


@router.patch("/{delivery_id}/employee", dependencies=staff_only)
def update_delivery_employee(delivery_id: str, payload: EmployeeRef, context: DomainContext = Depends(get_context)):
    delivery = _get_delivery(context, delivery_id)
    courier = _get_courier(context, payload.employee_id)
    updated = context.deliveries.update_employee(delivery["_id"], courier["_id"])
    context.orders.update_delivery_man(delivery["order"], courier["_id"])
    return updated


@router.patch("/{delivery_id}/estimated-delivery", dependencies=staff_only)
def update_delivery_estimate(delivery_id: str, payload: EstimateUpdate, context: DomainContext = Depends(get_context)):
    delivery = context.deliveries.update_estimated_delivery(delivery_id, payload.estimated_delivery)
    if not delivery:
        raise HTTPException(status_code=404, detail="Delivery not found")
    return delivery


@router.delete("/{delivery_id}", status_code=204, dependencies=[Depends(require_roles(ADMIN))])
def delete_delivery(delivery_id: str, context: DomainContext = Depends(get_context)):
    if not context.deliveries.delete_by_id(delivery_id):
        raise HTTPException(status_code=404, detail="Delivery not found")
    return Response(status_code=204)
