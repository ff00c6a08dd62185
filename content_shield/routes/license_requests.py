from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.auth import get_current_user
from content_shield.database import get_db
from content_shield.models.user import User
from content_shield.schemas.license_request import (
    LicenseRequestResponse,
    ReceivedLicenseRequest,
    RequestStatusUpdate,
    SentLicenseRequest,
)
from content_shield.services.license_service import LicenseService

router = APIRouter(prefix="/api/license-requests", tags=["License Requests"])


@router.get("/received", response_model=list[ReceivedLicenseRequest])
async def get_received_requests(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await LicenseService(db).get_received(current_user)


@router.get("/sent", response_model=list[SentLicenseRequest])
async def get_sent_requests(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await LicenseService(db).get_sent(current_user)


@router.patch("/{request_id}", response_model=LicenseRequestResponse)
async def resolve_request(
    request_id: int,
    payload: RequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending request on one of your own posts."""
    return await LicenseService(db).resolve_request(current_user, request_id, payload.status)
