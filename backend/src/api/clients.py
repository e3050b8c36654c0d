"""
Client API endpoints.

Any employee of the company manages its client book.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from auth.dependencies import get_current_employee, AuthContext
from services import ClientService
from api.responses import (
    ClientListResponse,
    ClientMutationResponse,
    ClientHistoryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ClientRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None


@router.get("", summary="List the company's clients")
async def list_clients(
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> ClientListResponse:
    return ClientListResponse(clients=ClientService.list_clients(db, auth))


@router.post("", summary="Add a client")
async def create_client(
    request: ClientRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> ClientMutationResponse:
    client = ClientService.create_client(db, auth, request.name, request.phone)
    return ClientMutationResponse(client=client)


@router.patch("/{client_id}", summary="Update a client")
async def update_client(
    client_id: int,
    request: ClientRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> ClientMutationResponse:
    client = ClientService.update_client(db, auth, client_id, request.name, request.phone)
    return ClientMutationResponse(client=client)


@router.get("/{client_id}/history", summary="List a client's appointments")
async def client_history(
    client_id: int,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> ClientHistoryResponse:
    return ClientHistoryResponse(history=ClientService.client_history(db, auth, client_id))
