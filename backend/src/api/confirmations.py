"""
Confirmation link API endpoints.

``/confirm`` is public: the token in the link is the credential.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from auth.dependencies import get_current_employee, AuthContext
from services import ConfirmationService
from services.notification_service import Notifier, get_notifier
from api.responses import (
    ConfirmationResolveResponse,
    ConfirmationResultResponse,
    ConfirmationListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ConfirmationActionRequest(BaseModel):
    """Client's answer to a confirmation link."""
    token: Optional[str] = None
    type: Optional[str] = None
    action: Optional[str] = None
    """'confirm' or 'reject'."""


@router.get("/confirm", summary="Resolve a confirmation link")
async def resolve_confirmation(
    token: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="confirm, delete, change or waitlist"),
    db: Session = Depends(get_db)
) -> ConfirmationResolveResponse:
    snapshot = ConfirmationService.resolve(db, token, type)
    return ConfirmationResolveResponse(**snapshot)


@router.post("/confirm", summary="Answer a confirmation link")
async def answer_confirmation(
    request: ConfirmationActionRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
) -> ConfirmationResultResponse:
    result = ConfirmationService.consume(db, request.token, request.type, request.action, notifier=notifier)
    return ConfirmationResultResponse(**result)


@router.get("/confirmations", summary="List confirmation links")
async def list_confirmations(
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> ConfirmationListResponse:
    """A boss sees the whole company; staff see links of their own appointments."""
    confirmations = ConfirmationService.list_for_scope(db, auth)
    return ConfirmationListResponse(confirmations=confirmations)
