from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.auth import get_current_user
from content_shield.database import get_db
from content_shield.models.user import User
from content_shield.schemas.content import ContentWithAccess
from content_shield.schemas.user import UserProfile
from content_shield.services.access_resolver import AccessResolver
from content_shield.services.blob_store import LocalBlobStore, get_blob_store
from content_shield.services.content_service import ContentService
from content_shield.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/{user_id}", response_model=UserProfile)
async def get_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).get_profile(user_id)


@router.get("/{user_id}/posts", response_model=list[ContentWithAccess])
async def get_user_posts(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    """Posts owned by a user, annotated with the viewer's access."""
    await UserService(db).get_user(user_id)
    contents = await ContentService(db, blob_store).list_by_owner(user_id)
    return await AccessResolver(db).annotate_access(current_user, contents)
