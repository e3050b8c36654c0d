"""
Waitlist API endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from auth.dependencies import get_current_employee, AuthContext
from services import WaitlistService
from api.responses import (
    StatusResponse,
    WaitlistListResponse,
    WaitlistEntryMutationResponse,
    WaitlistAssignResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class WaitlistCreateRequest(BaseModel):
    appointment_id: Optional[int] = None
    client_id: Optional[int] = None


class WaitlistUpdateRequest(BaseModel):
    id: Optional[int] = None
    appointment_id: Optional[int] = None
    client_id: Optional[int] = None


class WaitlistAssignRequest(BaseModel):
    waitlist_id: Optional[int] = None


@router.get("", summary="List waitlist entries")
async def list_waitlist(
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> WaitlistListResponse:
    return WaitlistListResponse(entries=WaitlistService.list_entries(db, auth))


@router.post("", summary="Add a client to a waitlist")
async def create_waitlist_entry(
    request: WaitlistCreateRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> WaitlistEntryMutationResponse:
    result = WaitlistService.create_entry(db, auth, request.appointment_id, request.client_id)
    return WaitlistEntryMutationResponse(**result)


@router.patch("", summary="Update a waitlist entry")
async def update_waitlist_entry(
    request: WaitlistUpdateRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> WaitlistEntryMutationResponse:
    result = WaitlistService.update_entry(db, auth, request.id, request.appointment_id, request.client_id)
    return WaitlistEntryMutationResponse(**result)


@router.delete("", summary="Remove a waitlist entry")
async def delete_waitlist_entry(
    id: Optional[int] = Query(None),
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> StatusResponse:
    result = WaitlistService.delete_entry(db, auth, id)
    return StatusResponse(message=result['message'])


@router.post("/assign", summary="Reassign a freed appointment to a waiting client")
async def assign_waitlist_entry(
    request: WaitlistAssignRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> WaitlistAssignResponse:
    result = WaitlistService.assign(db, auth, request.waitlist_id)
    return WaitlistAssignResponse(**result)
