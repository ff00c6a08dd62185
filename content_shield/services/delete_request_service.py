"""
Delete Request Service

Owners may ask an admin to remove their content instead of deleting it
directly. Requests follow the same pending -> approved | rejected lifecycle
as license requests; approving one deletes the content.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from content_shield.constants.licensing import RequestStatus, can_transition
from content_shield.exceptions import (
    DeleteRequestNotFoundError,
    InvalidStateTransitionError,
    PermissionDeniedError,
)
from content_shield.models.content import ContentItem
from content_shield.models.delete_request import DeleteRequest
from content_shield.models.user import User
from content_shield.services.content_service import ContentService

logger = logging.getLogger(__name__)

DEFAULT_REASON = "No reason provided"


def _as_dict(request: DeleteRequest) -> dict:
    return {
        "id": request.id,
        "content_id": request.content_id,
        "user_id": request.user_id,
        "reason": request.reason,
        "status": request.status,
        "created_at": request.created_at,
        "updated_at": request.updated_at,
    }


class DeleteRequestService:
    def __init__(self, db: AsyncSession, content_service: ContentService):
        self.db = db
        self.content_service = content_service

    async def create_request(self, owner: User, content_id: int, reason: str | None = None) -> DeleteRequest:
        """Only the owner of a content item may request its deletion."""
        content = await self.content_service.get_content(content_id)
        if content.owner_id != owner.id:
            raise PermissionDeniedError("Only the owner can request post deletion", action="request_deletion")

        request = DeleteRequest(
            content_id=content_id,
            user_id=owner.id,
            reason=reason or DEFAULT_REASON,
            status=RequestStatus.PENDING.value,
        )
        self.db.add(request)
        await self.db.commit()
        await self.db.refresh(request)

        logger.info(f"Delete request created: id={request.id}, content={content_id}")
        return request

    async def list_requests(self, actor: User) -> list[dict]:
        """All delete requests with content and user details, newest first."""
        if not actor.is_admin:
            raise PermissionDeniedError("Admin privileges required", action="list_delete_requests")

        result = await self.db.execute(
            select(DeleteRequest)
            .options(
                selectinload(DeleteRequest.content).selectinload(ContentItem.owner),
                selectinload(DeleteRequest.user),
            )
            .order_by(DeleteRequest.created_at.desc(), DeleteRequest.id.desc())
        )
        return [
            {
                **_as_dict(request),
                "content_title": request.content.title,
                "content_owner_email": request.content.owner.email,
                "user_email": request.user.email,
            }
            for request in result.scalars().all()
        ]

    async def resolve_request(self, actor: User, request_id: int, status: RequestStatus | str) -> dict:
        """
        Approve or reject a pending delete request as an admin.

        Approval deletes the content together with every delete request on
        it, so the resolved request is returned as a plain snapshot.
        """
        target = RequestStatus(status)
        if not actor.is_admin:
            raise PermissionDeniedError("Admin privileges required", action="resolve_delete_request")

        request = await self.db.get(DeleteRequest, request_id)
        if request is None:
            raise DeleteRequestNotFoundError(request_id)

        if not can_transition(request.status, target.value):
            raise InvalidStateTransitionError(request.status, target.value, resource_type="Delete request")

        content_id = request.content_id
        result = await self.db.execute(
            update(DeleteRequest)
            .where(DeleteRequest.id == request_id, DeleteRequest.status == RequestStatus.PENDING.value)
            .values(status=target.value, updated_at=datetime.now(timezone.utc))
        )
        if result.rowcount != 1:
            # Resolved concurrently; approval also removes the row
            await self.db.rollback()
            current = await self.db.scalar(select(DeleteRequest.status).where(DeleteRequest.id == request_id))
            if current is None:
                raise DeleteRequestNotFoundError(request_id)
            raise InvalidStateTransitionError(current, target.value, resource_type="Delete request")

        await self.db.refresh(request)
        snapshot = _as_dict(request)

        blob_keys: list[str] = []
        if target == RequestStatus.APPROVED:
            content = await self.content_service.get_content(content_id)
            blob_keys = await self.content_service.purge_content(content)

        await self.db.commit()
        await self.content_service.discard_blobs(blob_keys)

        logger.info(f"Delete request {request_id} {target.value} by admin {actor.id}")
        return snapshot
