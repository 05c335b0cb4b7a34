from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from database import rollback_on_error
from dependencies import ADMIN, MANAGER, PREPARER, ensure_restaurant_access, get_context, require_roles
from schemas import Address, Restaurant

router = APIRouter(prefix="/restaurants", tags=["Restaurants"])


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    telephone: Optional[str] = None
    address: Address
    responsible: Optional[str] = None


class EmployeeRef(BaseModel):
    employee_id: str


def _get_restaurant(context: DomainContext, restaurant_id: str) -> dict:
    restaurant = context.restaurants.find_by_id(restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


def _get_employee(context: DomainContext, employee_id: str) -> dict:
    employee = context.employees.find_by_id(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


def _attach_employee(context: DomainContext, restaurant_id: str, employee: dict) -> None:
    previous = employee.get("restaurant")
    if previous and previous != restaurant_id:
        context.restaurants.remove_employee(previous, employee["_id"])
    context.employees.update_restaurant(employee["_id"], restaurant_id)
    context.restaurants.add_employee(restaurant_id, employee["_id"])


@router.post("/", dependencies=[Depends(require_roles(ADMIN))])
def create_restaurant(payload: RestaurantCreate, context: DomainContext = Depends(get_context)):
    responsible = _get_employee(context, payload.responsible) if payload.responsible else None
    with rollback_on_error() as undo:
        address = context.addresses.create(payload.address)
        undo.append(lambda: context.addresses.delete_by_id(address["_id"]))
        restaurant = context.restaurants.create(Restaurant(
            name=payload.name,
            description=payload.description,
            telephone=payload.telephone,
            address=address["_id"],
            responsible=payload.responsible,
        ))
        undo.append(lambda: context.restaurants.delete_by_id(restaurant["_id"]))
    if responsible:
        _attach_employee(context, restaurant["_id"], responsible)
    return context.restaurants.find_with_address(restaurant["_id"])


@router.get("/")
def list_restaurants(context: DomainContext = Depends(get_context)):
    return context.restaurants.find_many(sort=[("name", 1)])


@router.get("/{restaurant_id}")
def get_restaurant(restaurant_id: str, context: DomainContext = Depends(get_context)):
    restaurant = context.restaurants.find_with_address(restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


@router.patch("/{restaurant_id}/responsible", dependencies=[Depends(require_roles(ADMIN))])
def update_restaurant_responsible(restaurant_id: str, payload: EmployeeRef,
                                  context: DomainContext = Depends(get_context)):
    _get_restaurant(context, restaurant_id)
    employee = _get_employee(context, payload.employee_id)
    _attach_employee(context, restaurant_id, employee)
    return context.restaurants.update_responsible(restaurant_id, employee["_id"])


@router.post("/{restaurant_id}/employees", dependencies=[Depends(require_roles(ADMIN))])
def add_restaurant_employee(restaurant_id: str, payload: EmployeeRef,
                            context: DomainContext = Depends(get_context)):
    _get_restaurant(context, restaurant_id)
    employee = _get_employee(context, payload.employee_id)
    _attach_employee(context, restaurant_id, employee)
    return context.restaurants.find_by_id(restaurant_id)


@router.get("/{restaurant_id}/orders")
def get_restaurant_orders(restaurant_id: str,
                          employee: dict = Depends(require_roles(ADMIN, MANAGER, PREPARER)),
                          context: DomainContext = Depends(get_context)):
    ensure_restaurant_access(employee, restaurant_id)
    _get_restaurant(context, restaurant_id)
    return context.orders.find_by_restaurant(restaurant_id)


@router.delete("/{restaurant_id}", status_code=204, dependencies=[Depends(require_roles(ADMIN))])
def delete_restaurant(restaurant_id: str, context: DomainContext = Depends(get_context)):
    restaurant = context.restaurants.delete_by_id(restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    context.addresses.delete_by_id(restaurant["address"])
    for employee in context.employees.find_by_restaurant(restaurant["_id"]):
        context.employees.unset(employee["_id"], "restaurant")
    return Response(status_code=204)
