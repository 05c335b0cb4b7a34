import logging
from typing import Callable, List

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field

from context import DomainContext
from dependencies import ADMIN, get_context, require_roles
from schemas import Account
from security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


class AccountCreate(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


def create_account(context: DomainContext, payload: AccountCreate, undo: List[Callable]) -> dict:
    """Insert an account, registering its removal on ``undo``."""
    if context.accounts.find_by_email(payload.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    account = context.accounts.create(Account(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password_hash=hash_password(payload.password),
    ))
    undo.append(lambda: context.accounts.delete_by_id(account["_id"]))
    return context.accounts.without_secrets(account)


@router.get("/{user_id}", dependencies=[Depends(require_roles(ADMIN))])
def get_user(user_id: str, context: DomainContext = Depends(get_context)):
    account = context.accounts.find_by_id(user_id)
    if not account:
        raise HTTPException(status_code=404, detail="User not found")
    return context.accounts.without_secrets(account)


@router.delete("/{user_id}", status_code=204, dependencies=[Depends(require_roles(ADMIN))])
def delete_user(user_id: str, context: DomainContext = Depends(get_context)):
    account = context.accounts.delete_by_id(user_id)
    if not account:
        raise HTTPException(status_code=404, detail="User not found")
    customer = context.customers.find_by_account(account["_id"])
    if customer:
        context.customers.delete_by_id(customer["_id"])
    employee = context.employees.find_by_account(account["_id"])
    if employee:
        if employee.get("tracker"):
            context.trackers.delete_by_id(employee["tracker"])
        if employee.get("restaurant"):
            context.restaurants.remove_employee(employee["restaurant"], employee["_id"])
        context.employees.delete_by_id(employee["_id"])
    logger.info("Deleted account %s", account["email"])
    return Response(status_code=204)
