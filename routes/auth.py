import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr

from context import DomainContext
from dependencies import Principal, get_context, get_principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    session: str


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, context: DomainContext = Depends(get_context)):
    account = context.accounts.find_valid(payload.email, payload.password)
    if not account:
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    employee = context.employees.find_by_account(account["_id"])
    if employee:
        session = context.sessions.create_for_employee(employee["_id"])
        context.employees.update_session(employee["_id"], session["_id"])
    else:
        session = context.sessions.create_for_account(account["_id"])
        customer = context.customers.find_by_account(account["_id"])
        if customer:
            context.customers.update_session(customer["_id"], session["_id"])
    return LoginResponse(session=session["token"])


@router.get("/me")
def me(principal: Principal = Depends(get_principal)):
    return {
        "account": principal.account,
        "employee": principal.employee,
        "customer": principal.customer,
    }


@router.post("/logout", status_code=204)
def logout(principal: Principal = Depends(get_principal), context: DomainContext = Depends(get_context)):
    context.sessions.delete_by_id(principal.session_id)
    return Response(status_code=204)
