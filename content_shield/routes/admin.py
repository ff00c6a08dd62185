"""
Admin Routes

User management, the full post listing and delete-request moderation.
Every route requires the admin role.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.auth import require_admin
from content_shield.database import get_db
from content_shield.models.user import User
from content_shield.schemas.content import ContentResponse
from content_shield.schemas.delete_request import DeleteRequestDetail, DeleteRequestResponse
from content_shield.schemas.license_request import RequestStatusUpdate
from content_shield.schemas.user import UserResponse
from content_shield.services.blob_store import LocalBlobStore, get_blob_store
from content_shield.services.content_service import ContentService
from content_shield.services.delete_request_service import DeleteRequestService
from content_shield.services.user_service import UserService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await UserService(db).list_users()


@router.get("/users/count")
async def count_users(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return {"count": await UserService(db).count_non_admin_users()}


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    await UserService(db, ContentService(db, blob_store)).delete_user(admin, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/posts", response_model=list[ContentResponse])
async def list_posts(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    return await ContentService(db, blob_store).list_feed()


@router.get("/delete-requests", response_model=list[DeleteRequestDetail])
async def list_delete_requests(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    return await DeleteRequestService(db, ContentService(db, blob_store)).list_requests(admin)


@router.patch("/delete-requests/{request_id}", response_model=DeleteRequestResponse)
async def resolve_delete_request(
    request_id: int,
    payload: RequestStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    service = DeleteRequestService(db, ContentService(db, blob_store))
    return await service.resolve_request(admin, request_id, payload.status)
