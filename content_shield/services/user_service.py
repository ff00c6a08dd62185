"""
User Service

Account registration, login, profile statistics and admin user management.
"""

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.auth import hash_password, verify_password
from content_shield.constants.licensing import RequestStatus
from content_shield.constants.roles import DEFAULT_ROLE, RoleName
from content_shield.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    PermissionDeniedError,
    UserNotFoundError,
)
from content_shield.models.content import ContentItem
from content_shield.models.delete_request import DeleteRequest
from content_shield.models.engagement import Comment, Like
from content_shield.models.license_request import LicenseRequest
from content_shield.models.user import User
from content_shield.services.content_service import ContentService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession, content_service: ContentService | None = None):
        self.db = db
        self.content_service = content_service

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def register_user(self, email: str, password: str, role: RoleName = DEFAULT_ROLE) -> User:
        """
        Create an account.

        Raises:
            DuplicateResourceError: If the email is already registered
        """
        if await self.get_by_email(email) is not None:
            raise DuplicateResourceError("User", "email", email, message="Email already registered")

        user = User(email=email, hashed_password=hash_password(password), role=role.value)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as err:
            await self.db.rollback()
            raise DuplicateResourceError("User", "email", email, message="Email already registered") from err

        await self.db.refresh(user)
        logger.info(f"User registered: id={user.id}, role={user.role}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info(f"Failed login attempt for {email}")
            raise InvalidCredentialsError()
        return user

    async def get_profile(self, user_id: int) -> dict:
        """User data plus post count and number of licenses they have granted on their content."""
        user = await self.get_user(user_id)

        post_count = await self.db.scalar(
            select(func.count()).select_from(ContentItem).where(ContentItem.owner_id == user_id)
        )
        license_count = await self.db.scalar(
            select(func.count())
            .select_from(LicenseRequest)
            .where(
                LicenseRequest.owner_id == user_id,
                LicenseRequest.status == RequestStatus.APPROVED.value,
            )
        )

        return {
            "id": user.id,
            "email": user.email,
            "avatar_url": user.avatar_url,
            "role": user.role,
            "created_at": user.created_at,
            "post_count": post_count or 0,
            "license_count": license_count or 0,
        }

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def count_non_admin_users(self) -> int:
        count = await self.db.scalar(select(func.count()).select_from(User).where(User.role != RoleName.ADMIN.value))
        return count or 0

    async def delete_user(self, actor: User, user_id: int) -> None:
        """
        Delete a non-admin user with all their content and activity, as an admin.

        Owned content is purged with its dependents first; then the user's own
        license requests, comments, likes and delete requests; then the user.
        Counters on other users' content are decremented for the removed likes
        and comments. Everything is committed at once and blobs are removed
        afterwards.

        Raises:
            PermissionDeniedError: If *actor* is not an admin, or the target is one
            UserNotFoundError: If the user does not exist
        """
        if not actor.is_admin:
            raise PermissionDeniedError("Admin privileges required", action="delete_user")

        user = await self.get_user(user_id)
        if user.is_admin:
            raise PermissionDeniedError("Admin users cannot be deleted", action="delete_user")

        blob_keys: list[str] = []
        for content in await self.content_service.list_by_owner(user_id):
            blob_keys.extend(await self.content_service.purge_content(content))

        for model, counter in ((Like, ContentItem.like_count), (Comment, ContentItem.comment_count)):
            result = await self.db.execute(
                select(model.content_id, func.count()).where(model.user_id == user_id).group_by(model.content_id)
            )
            for content_id, removed in result.all():
                await self.db.execute(
                    update(ContentItem).where(ContentItem.id == content_id).values({counter: counter - removed})
                )

        await self.db.execute(
            delete(LicenseRequest).where((LicenseRequest.requester_id == user_id) | (LicenseRequest.owner_id == user_id))
        )
        await self.db.execute(delete(Comment).where(Comment.user_id == user_id))
        await self.db.execute(delete(Like).where(Like.user_id == user_id))
        await self.db.execute(delete(DeleteRequest).where(DeleteRequest.user_id == user_id))
        await self.db.delete(user)

        await self.db.commit()
        await self.content_service.discard_blobs(blob_keys)

        logger.info(f"User {user_id} deleted by admin {actor.id} ({len(blob_keys)} stored files removed)")

    async def ensure_admin(self, email: str, password: str) -> User:
        """Create the bootstrap admin account unless the email is already taken."""
        existing = await self.get_by_email(email)
        if existing is not None:
            return existing

        admin = await self.register_user(email, password, role=RoleName.ADMIN)
        logger.info(f"Bootstrap admin account created: {email}")
        return admin
