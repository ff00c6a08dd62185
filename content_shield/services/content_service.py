"""
Content Service

Catalogue queries and content deletion.

Deleting a content item is an explicit multi-step operation: the ids of all
dependent rows (license requests, comments, likes, delete requests) are
gathered, those rows are deleted in dependency order, then the content row
itself. Callers commit once; the stored blobs are removed only after the
commit succeeds.
"""

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.config import settings
from content_shield.exceptions import ContentNotFoundError, PermissionDeniedError
from content_shield.models.content import ContentItem
from content_shield.models.delete_request import DeleteRequest
from content_shield.models.engagement import Comment, Like
from content_shield.models.license_request import LicenseRequest
from content_shield.models.user import User
from content_shield.services.blob_store import LocalBlobStore

logger = logging.getLogger(__name__)

# Dependents of a content item, in deletion order
CONTENT_DEPENDENTS = (LicenseRequest, Comment, Like, DeleteRequest)


class ContentService:
    """Service for listing, reading and deleting content items."""

    def __init__(self, db: AsyncSession, blob_store: LocalBlobStore):
        self.db = db
        self.blob_store = blob_store

    # ── Queries ───────────────────────────────────────────────────────────────

    async def get_content(self, content_id: int) -> ContentItem:
        content = await self.db.get(ContentItem, content_id)
        if content is None:
            raise ContentNotFoundError(content_id)
        return content

    async def list_feed(self, skip: int = 0, limit: int | None = None) -> list[ContentItem]:
        """All content, newest first."""
        query = select(ContentItem).order_by(ContentItem.created_at.desc(), ContentItem.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_trending(self, limit: int | None = None) -> list[ContentItem]:
        """Most liked content."""
        result = await self.db.execute(
            select(ContentItem)
            .order_by(ContentItem.like_count.desc(), ContentItem.created_at.desc(), ContentItem.id.desc())
            .limit(limit or settings.trending_limit)
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: int) -> list[ContentItem]:
        result = await self.db.execute(
            select(ContentItem)
            .where(ContentItem.owner_id == owner_id)
            .order_by(ContentItem.created_at.desc(), ContentItem.id.desc())
        )
        return list(result.scalars().all())

    def read_file(self, content: ContentItem) -> bytes:
        """Stored bytes of a content item; raises BlobNotFoundError if missing."""
        return self.blob_store.get(content.file_path)

    # ── Deletion ──────────────────────────────────────────────────────────────

    async def purge_content(self, content: ContentItem) -> list[str]:
        """
        Delete a content item and every row that depends on it, without
        committing.

        Returns:
            Blob keys to remove once the transaction has committed
        """
        counts = {}
        for model in CONTENT_DEPENDENTS:
            result = await self.db.execute(select(model.id).where(model.content_id == content.id))
            ids = list(result.scalars().all())
            if ids:
                await self.db.execute(delete(model).where(model.id.in_(ids)))
            counts[model.__tablename__] = len(ids)

        blob_keys = [key for key in (content.file_path, content.thumbnail_path) if key]
        await self.db.delete(content)
        await self.db.flush()

        logger.info(f"Content {content.id} purged with dependents {counts}")
        return blob_keys

    async def discard_blobs(self, keys: list[str]) -> None:
        """
        Remove blobs of deleted content; a failure leaves an orphan file, not an error.

        Keys are content-addressed, so a key re-registered since the delete
        committed belongs to the new item and is kept.
        """
        if not keys:
            return

        result = await self.db.execute(
            select(ContentItem.file_path, ContentItem.thumbnail_path).where(
                or_(ContentItem.file_path.in_(keys), ContentItem.thumbnail_path.in_(keys))
            )
        )
        live_keys = {key for row in result.all() for key in row if key}

        for key in keys:
            if key in live_keys:
                logger.info(f"Stored file {key} was re-registered; keeping it")
                continue
            try:
                self.blob_store.delete(key)
            except OSError as e:
                logger.warning(f"Error deleting stored file {key}: {e}")

    async def delete_content(self, actor: User, content_id: int) -> None:
        """
        Delete a content item as its owner or an admin.

        Raises:
            ContentNotFoundError: If the content item does not exist
            PermissionDeniedError: If *actor* is neither owner nor admin
        """
        content = await self.get_content(content_id)

        if content.owner_id != actor.id and not actor.is_admin:
            raise PermissionDeniedError("You don't have permission to delete this post", action="delete_content")

        blob_keys = await self.purge_content(content)
        await self.db.commit()
        await self.discard_blobs(blob_keys)
