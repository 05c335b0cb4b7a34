import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from context import DomainContext
from database import rollback_on_error
from dependencies import ADMIN, get_context, require_roles
from routes.users import AccountCreate, create_account
from schemas import Employee, EmployeeRole, Tracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"], dependencies=[Depends(require_roles(ADMIN))])


class EmployeeFields(BaseModel):
    role: EmployeeRole
    restaurant: Optional[str] = None


class EmployeeCreate(BaseModel):
    user: AccountCreate
    employee: EmployeeFields


@router.post("/")
def create_employee(payload: EmployeeCreate, context: DomainContext = Depends(get_context)):
    restaurant_id = payload.employee.restaurant
    if restaurant_id and not context.restaurants.find_by_id(restaurant_id):
        raise HTTPException(status_code=404, detail="Restaurant not found")

    with rollback_on_error() as undo:
        account = create_account(context, payload.user, undo)
        employee = context.employees.create(Employee(
            role=payload.employee.role,
            user=account["_id"],
            restaurant=restaurant_id,
        ))
        undo.append(lambda: context.employees.delete_by_id(employee["_id"]))

        if restaurant_id:
            context.restaurants.add_employee(restaurant_id, employee["_id"])
            undo.append(lambda: context.restaurants.remove_employee(restaurant_id, employee["_id"]))

        if payload.employee.role == EmployeeRole.DELIVERYMAN:
            tracker = context.trackers.create(Tracker(employee=employee["_id"]))
            undo.append(lambda: context.trackers.delete_by_id(tracker["_id"]))
            employee = context.employees.update_tracker(employee["_id"], tracker["_id"])

    logger.info("Created %s employee %s", employee["role"], account["email"])
    return {"employee": employee, "user": account}


@router.get("/")
def get_employee_by_email(email: str = Query(..., min_length=1), context: DomainContext = Depends(get_context)):
    employee = context.employees.find_by_email(email)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return context.employees.hydrate(employee)


@router.get("/{employee_id}")
def get_employee(employee_id: str, context: DomainContext = Depends(get_context)):
    employee = context.employees.find_by_id(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return context.employees.hydrate(employee)


@router.delete("/{email}", status_code=204)
def delete_employee(email: str, context: DomainContext = Depends(get_context)):
    employee = context.employees.delete_by_email(email)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    if employee.get("tracker"):
        context.trackers.delete_by_id(employee["tracker"])
    if employee.get("restaurant"):
        context.restaurants.remove_employee(employee["restaurant"], employee["_id"])
    context.accounts.delete_by_id(employee["user"])
    logger.info("Deleted employee %s", email)
    return Response(status_code=204)
