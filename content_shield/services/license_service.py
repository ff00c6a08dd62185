"""
License Service

License request workflow: a non-owner asks for access to permission- or
paid-licensed content, and the content owner approves or rejects it.

Request lifecycle:
  pending -> approved   (the approved request is the access grant)
  pending -> rejected
Approved and rejected are terminal. Only the content owner may resolve a
request.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from content_shield.constants.licensing import GRANT_MEDIATED_LICENSES, RequestStatus, can_transition, parse_license_type
from content_shield.exceptions import (
    ContentNotFoundError,
    InvalidOperationError,
    InvalidStateTransitionError,
    LicenseRequestNotFoundError,
    PendingRequestExistsError,
    PermissionDeniedError,
)
from content_shield.models.content import ContentItem
from content_shield.models.license_request import LicenseRequest
from content_shield.models.user import User

logger = logging.getLogger(__name__)


class LicenseService:
    """Service for creating and resolving license requests."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_pending(self, content_id: int, requester_id: int) -> LicenseRequest | None:
        result = await self.db.execute(
            select(LicenseRequest).where(
                LicenseRequest.content_id == content_id,
                LicenseRequest.requester_id == requester_id,
                LicenseRequest.status == RequestStatus.PENDING.value,
            )
        )
        return result.scalars().first()

    async def request_license(self, requester: User, content_id: int) -> LicenseRequest:
        """
        Create a pending license request.

        Args:
            requester: User asking for access
            content_id: Target content item

        Returns:
            The created pending LicenseRequest

        Raises:
            ContentNotFoundError: If the content item does not exist
            InvalidOperationError: If the requester owns the content, or its
                license type is not granted through requests
            PendingRequestExistsError: If a pending request already exists
        """
        requester_id = requester.id
        content = await self.db.get(ContentItem, content_id)
        if content is None:
            raise ContentNotFoundError(content_id)

        if content.owner_id == requester_id:
            raise InvalidOperationError("You can't request a license for your own content")

        if parse_license_type(content.license_type) not in GRANT_MEDIATED_LICENSES:
            raise InvalidOperationError(
                f"This content doesn't require a license request (type: {content.license_type})",
                details={"license_type": content.license_type},
            )

        if await self._find_pending(content_id, requester_id) is not None:
            raise PendingRequestExistsError(content_id)

        license_request = LicenseRequest(
            content_id=content_id,
            requester_id=requester_id,
            owner_id=content.owner_id,
            status=RequestStatus.PENDING.value,
        )
        self.db.add(license_request)
        try:
            await self.db.commit()
        except IntegrityError as err:
            # A concurrent request for the same pair won the partial unique index
            await self.db.rollback()
            raise PendingRequestExistsError(content_id) from err

        await self.db.refresh(license_request)
        logger.info(f"License request created: id={license_request.id}, content={content_id}, user={requester_id}")
        return license_request

    async def get_request(self, request_id: int) -> LicenseRequest:
        license_request = await self.db.get(LicenseRequest, request_id)
        if license_request is None:
            raise LicenseRequestNotFoundError(request_id)
        return license_request

    async def resolve_request(self, actor: User, request_id: int, status: RequestStatus | str) -> LicenseRequest:
        """
        Approve or reject a pending request.

        Raises:
            LicenseRequestNotFoundError: If the request does not exist
            PermissionDeniedError: If *actor* does not own the content
            InvalidStateTransitionError: If the request is not pending, or
                *status* is not a terminal status
        """
        target = RequestStatus(status)
        license_request = await self.get_request(request_id)

        if license_request.owner_id != actor.id:
            raise PermissionDeniedError(
                "You can only update license requests for your own content", action="resolve_license_request"
            )

        if not can_transition(license_request.status, target.value):
            raise InvalidStateTransitionError(license_request.status, target.value, resource_type="License request")

        # Conditional on the stored status so a concurrent resolution cannot be overwritten
        result = await self.db.execute(
            update(LicenseRequest)
            .where(LicenseRequest.id == request_id, LicenseRequest.status == RequestStatus.PENDING.value)
            .values(status=target.value, updated_at=datetime.now(timezone.utc))
        )
        if result.rowcount != 1:
            await self.db.rollback()
            current = await self.db.scalar(select(LicenseRequest.status).where(LicenseRequest.id == request_id))
            if current is None:
                raise LicenseRequestNotFoundError(request_id)
            logger.info(f"License request {request_id} was already resolved ({current})")
            raise InvalidStateTransitionError(current, target.value, resource_type="License request")

        await self.db.commit()
        await self.db.refresh(license_request)

        logger.info(f"License request {request_id} {target.value} by user {actor.id}")
        return license_request

    async def get_received(self, owner: User) -> list[dict]:
        """Requests on the owner's content, newest first."""
        result = await self.db.execute(
            select(LicenseRequest)
            .options(selectinload(LicenseRequest.content), selectinload(LicenseRequest.requester))
            .where(LicenseRequest.owner_id == owner.id)
            .order_by(LicenseRequest.created_at.desc(), LicenseRequest.id.desc())
        )
        return [
            {
                "id": request.id,
                "content_id": request.content_id,
                "content_title": request.content.title,
                "requester_id": request.requester_id,
                "requester_email": request.requester.email,
                "requester_avatar_url": request.requester.avatar_url,
                "status": request.status,
                "created_at": request.created_at,
                "updated_at": request.updated_at,
            }
            for request in result.scalars().all()
        ]

    async def get_sent(self, requester: User) -> list[dict]:
        """Requests the user has made, newest first."""
        result = await self.db.execute(
            select(LicenseRequest)
            .options(selectinload(LicenseRequest.content), selectinload(LicenseRequest.owner))
            .where(LicenseRequest.requester_id == requester.id)
            .order_by(LicenseRequest.created_at.desc(), LicenseRequest.id.desc())
        )
        return [
            {
                "id": request.id,
                "content_id": request.content_id,
                "content_title": request.content.title,
                "owner_id": request.owner_id,
                "owner_email": request.owner.email,
                "status": request.status,
                "created_at": request.created_at,
                "updated_at": request.updated_at,
            }
            for request in result.scalars().all()
        ]
