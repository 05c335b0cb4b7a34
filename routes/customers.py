import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from database import rollback_on_error
from dependencies import ADMIN, Principal, ensure_self_or_staff, get_context, get_principal, require_roles
from routes.users import AccountCreate, create_account
from schemas import Address, Customer
from security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


class SignupRequest(BaseModel):
    user: AccountCreate


class PasswordUpdate(BaseModel):
    password: str = Field(..., min_length=1)


def _get_customer(context: DomainContext, customer_id: str) -> dict:
    customer = context.customers.find_by_id(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.post("/")
def create_customer(payload: SignupRequest, context: DomainContext = Depends(get_context)):
    with rollback_on_error() as undo:
        account = create_account(context, payload.user, undo)
        customer = context.customers.create(Customer(user=account["_id"]))
    logger.info("Registered customer %s", account["email"])
    return {"customer": customer, "user": account}


@router.get("/{customer_id}")
def get_customer(customer_id: str, principal: Principal = Depends(get_principal),
                 context: DomainContext = Depends(get_context)):
    ensure_self_or_staff(principal, customer_id)
    return context.customers.hydrate(_get_customer(context, customer_id))


@router.get("/{customer_id}/orders")
def get_customer_orders(customer_id: str, principal: Principal = Depends(get_principal),
                        context: DomainContext = Depends(get_context)):
    ensure_self_or_staff(principal, customer_id)
    _get_customer(context, customer_id)
    return context.orders.find_by_customer(customer_id)


@router.patch("/{customer_id}/password")
def update_customer_password(customer_id: str, payload: PasswordUpdate,
                             principal: Principal = Depends(get_principal),
                             context: DomainContext = Depends(get_context)):
    ensure_self_or_staff(principal, customer_id, ADMIN)
    customer = _get_customer(context, customer_id)
    account = context.accounts.update_password(customer["user"], hash_password(payload.password))
    if not account:
        raise HTTPException(status_code=404, detail="User not found")
    return context.accounts.without_secrets(account)


@router.patch("/{customer_id}/address")
def update_customer_address(customer_id: str, payload: Address,
                            principal: Principal = Depends(get_principal),
                            context: DomainContext = Depends(get_context)):
    ensure_self_or_staff(principal, customer_id, ADMIN)
    customer = _get_customer(context, customer_id)
    previous = context.accounts.find_by_id(customer["user"])
    if not previous:
        raise HTTPException(status_code=404, detail="User not found")
    with rollback_on_error() as undo:
        address = context.addresses.create(payload)
        undo.append(lambda: context.addresses.delete_by_id(address["_id"]))
        account = context.accounts.update_address(customer["user"], address["_id"])
        if not account:
            raise HTTPException(status_code=404, detail="User not found")
    if previous.get("address"):
        context.addresses.delete_by_id(previous["address"])
    return {"user": context.accounts.without_secrets(account), "address": address}


@router.delete("/{customer_id}", status_code=204, dependencies=[Depends(require_roles(ADMIN))])
def delete_customer(customer_id: str, context: DomainContext = Depends(get_context)):
    customer = context.customers.delete_by_id(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    context.accounts.delete_by_id(customer["user"])
    return Response(status_code=204)
