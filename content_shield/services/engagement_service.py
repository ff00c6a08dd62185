"""
Engagement Service

Likes and comments on content items. Both require that the user can access
the content, and both keep the denormalized counters on ContentItem in step
with the rows.
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.exceptions import ContentNotFoundError, PermissionDeniedError
from content_shield.models.content import ContentItem
from content_shield.models.engagement import Comment, Like
from content_shield.models.user import User
from content_shield.services.access_resolver import AccessResolver

logger = logging.getLogger(__name__)


class EngagementService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.access_resolver = AccessResolver(db)

    async def _accessible_content(self, user: User, content_id: int, action: str) -> ContentItem:
        content = await self.db.get(ContentItem, content_id)
        if content is None:
            raise ContentNotFoundError(content_id)
        if not await self.access_resolver.can_access(user, content):
            raise PermissionDeniedError("You don't have access to this content", action=action)
        return content

    async def _find_like(self, user_id: int, content_id: int) -> Like | None:
        result = await self.db.execute(select(Like).where(Like.content_id == content_id, Like.user_id == user_id))
        return result.scalars().first()

    async def _like_count(self, content_id: int) -> int:
        return await self.db.scalar(select(ContentItem.like_count).where(ContentItem.id == content_id))

    async def like(self, user: User, content_id: int) -> dict:
        """Like a content item; liking twice is a no-op."""
        user_id = user.id
        await self._accessible_content(user, content_id, "like")

        if await self._find_like(user_id, content_id) is None:
            self.db.add(Like(content_id=content_id, user_id=user_id))
            await self.db.execute(
                update(ContentItem)
                .where(ContentItem.id == content_id)
                .values(like_count=ContentItem.like_count + 1)
            )
            try:
                await self.db.commit()
            except IntegrityError:
                # Lost a race with a concurrent like from the same user
                await self.db.rollback()

        return {"content_id": content_id, "liked": True, "like_count": await self._like_count(content_id)}

    async def unlike(self, user: User, content_id: int) -> dict:
        """Remove a like; unliking content that was never liked is a no-op."""
        user_id = user.id
        await self._accessible_content(user, content_id, "unlike")

        result = await self.db.execute(delete(Like).where(Like.content_id == content_id, Like.user_id == user_id))
        # Only the unlike that removed the row decrements
        if result.rowcount == 1:
            await self.db.execute(
                update(ContentItem)
                .where(ContentItem.id == content_id)
                .values(like_count=ContentItem.like_count - 1)
            )
        await self.db.commit()

        return {"content_id": content_id, "liked": False, "like_count": await self._like_count(content_id)}

    async def add_comment(self, user: User, content_id: int, body: str) -> Comment:
        user_id = user.id
        await self._accessible_content(user, content_id, "comment")

        comment = Comment(content_id=content_id, user_id=user_id, body=body)
        self.db.add(comment)
        await self.db.execute(
            update(ContentItem)
            .where(ContentItem.id == content_id)
            .values(comment_count=ContentItem.comment_count + 1)
        )
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info(f"Comment {comment.id} added to content {content_id} by user {user_id}")
        return comment

    async def list_comments(self, user: User, content_id: int) -> list[Comment]:
        """Comments on a content item, oldest first."""
        await self._accessible_content(user, content_id, "view_comments")
        result = await self.db.execute(
            select(Comment).where(Comment.content_id == content_id).order_by(Comment.created_at, Comment.id)
        )
        return list(result.scalars().all())
