"""
Request dependencies: domain context lookup, the session gate and the role gate.

Both gates fail closed. Anything missing along the way (header, session,
account, employee record, role) ends in 401 or 403, never in a default allow.
"""
import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from context import DomainContext
from repositories import AccountRepository
from schemas import EmployeeRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> DomainContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return context


class Principal(BaseModel):
    session_id: str
    account: dict
    employee: Optional[dict] = None
    customer: Optional[dict] = None

    @property
    def role(self) -> Optional[str]:
        return self.employee.get("role") if self.employee else None

    def owns_customer(self, customer_id: str) -> bool:
        return self.customer is not None and self.customer["_id"] == customer_id


def get_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: DomainContext = Depends(get_context),
) -> Principal:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing session token")
    session = context.sessions.find_active(credentials.credentials)
    if not session:
        logger.info("Rejected unknown session token")
        raise HTTPException(status_code=401, detail="Invalid session")

    employee = customer = account = None
    if session.get("employee"):
        employee = context.employees.find_by_id(session["employee"])
        if employee:
            account = context.accounts.find_by_id(employee["user"])
    elif session.get("user"):
        account = context.accounts.find_by_id(session["user"])
        if account:
            customer = context.customers.find_by_account(account["_id"])
    if account is None:
        logger.info("Session %s points to a principal that no longer exists", session["_id"])
        raise HTTPException(status_code=401, detail="Invalid session")

    principal = Principal(
        session_id=session["_id"],
        account=AccountRepository.without_secrets(account),
        employee=employee,
        customer=customer,
    )
    request.state.principal = principal
    return principal


def require_roles(*roles: EmployeeRole) -> Callable[..., dict]:
    """Dependency returning the caller's employee record when its role is allowed."""
    allowed = {role.value for role in roles}

    def role_gate(
        principal: Principal = Depends(get_principal),
        context: DomainContext = Depends(get_context),
    ) -> dict:
        employee = None
        if principal.employee:
            employee = context.employees.find_by_id(principal.employee["_id"])
        if not employee or employee.get("role") not in allowed:
            logger.warning(
                "Denied %s (role=%s); allowed roles: %s",
                principal.account.get("email"),
                employee.get("role") if employee else None,
                sorted(allowed),
            )
            raise HTTPException(status_code=403, detail="Forbidden")
        return employee

    return role_gate


def ensure_restaurant_access(employee: dict, restaurant_id: Optional[str]) -> None:
    """Admins reach every restaurant, other staff only the one they work for."""
    if employee.get("role") == EmployeeRole.ADMIN.value:
        return
    if not restaurant_id or employee.get("restaurant") != restaurant_id:
        raise HTTPException(status_code=403, detail="Forbidden")


def ensure_self_or_staff(principal: Principal, customer_id: str, *roles: EmployeeRole) -> None:
    """The customer themselves, or an employee holding one of ``roles`` (any role if none given)."""
    if principal.owns_customer(customer_id):
        return
    if principal.employee and (not roles or principal.role in {r.value for r in roles}):
        return
    raise HTTPException(status_code=403, detail="Forbidden")


ADMIN = EmployeeRole.ADMIN
MANAGER = EmployeeRole.MANAGER
PREPARER = EmployeeRole.PREPARER
DELIVERYMAN = EmployeeRole.DELIVERYMAN
