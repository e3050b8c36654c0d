"""
Authentication and authorization dependencies for FastAPI.

Resolves the bearer token to the employee acting on the request and exposes
the tenant scope used to filter every query: a boss sees the whole company,
staff see only their own records.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from auth.context import AuthContext, Scope  # noqa: F401  re-exported for routers
from core.constants import EMPLOYEE_ROLES
from core.database import get_db
from core.exceptions import ForbiddenError, NotFoundError
from services.jwt_service import jwt_service, TokenPayload
from models import Employee

logger = logging.getLogger(__name__)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None
    return jwt_service.verify_token(credentials.credentials)


def get_current_employee(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> AuthContext:
    """Get the authenticated employee context from the JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sesion invalida."
        )

    employee = db.query(Employee).filter(Employee.user_id == payload.sub).first()
    if not employee:
        logger.warning(f"No employee linked to user {payload.sub}")
        raise NotFoundError("Empleado no encontrado.")

    if employee.role not in EMPLOYEE_ROLES:
        logger.warning(f"Employee {employee.id} has unknown role '{employee.role}'")
        raise ForbiddenError()

    return AuthContext(
        employee_id=employee.id,
        company_id=employee.company_id,
        role=employee.role,
        name=employee.name
    )


def require_boss(auth: AuthContext = Depends(get_current_employee)) -> AuthContext:
    """Require the elevated (boss) role."""
    if not auth.is_boss():
        raise ForbiddenError("Solo el jefe puede realizar esta accion.")
    return auth
