"""
Service catalog API endpoints.

Every employee reads the catalog; only a boss creates or edits services.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from auth.dependencies import get_current_employee, AuthContext
from services import ServiceCatalogService
from api.responses import CatalogListResponse, CatalogMutationResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class CatalogServiceRequest(BaseModel):
    name: Optional[str] = None
    # Numbers or numeric strings; parsed by the service
    duration: Any = None
    price: Any = None
    employee_id: Optional[int] = None


@router.get("", summary="List the company's services")
async def list_services(
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> CatalogListResponse:
    return CatalogListResponse(services=ServiceCatalogService.list_services(db, auth))


@router.post("", summary="Create a service")
async def create_service(
    request: CatalogServiceRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> CatalogMutationResponse:
    service = ServiceCatalogService.create_service(
        db, auth, request.name, request.duration, request.price, request.employee_id
    )
    return CatalogMutationResponse(service=service)


@router.patch("/{service_id}", summary="Update a service")
async def update_service(
    service_id: int,
    request: CatalogServiceRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> CatalogMutationResponse:
    service = ServiceCatalogService.update_service(
        db, auth, service_id, request.name, request.duration, request.price, request.employee_id
    )
    return CatalogMutationResponse(service=service)
