"""
Access Resolver

Decides whether a user may view or download a content item.

Decision order for ``can_access`` (first match wins):
  1. The owner always has access.
  2. ``free`` content is open to every authenticated user.
  3. ``permission`` and ``paid`` content require an approved license request
     for the (content, user) pair.
  4. ``none`` content is closed to everyone but the owner.
  5. Any other license type is closed (fail closed).

``can_download`` additionally requires ``allow_download`` unless the user is
the owner.

The user is always passed in explicitly; nothing here reads session state,
and no decision is cached between calls.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.constants.licensing import GRANT_MEDIATED_LICENSES, LicenseType, RequestStatus, parse_license_type
from content_shield.exceptions import ContentNotFoundError
from content_shield.models.content import ContentItem
from content_shield.models.license_request import LicenseRequest
from content_shield.models.user import User
from content_shield.schemas.content import ContentResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    content_id: int
    can_access: bool
    can_download: bool


def decide_access(user_id: int, content: ContentItem, has_approved_grant: bool) -> bool:
    """Pure access decision given whether an approved grant exists."""
    if user_id == content.owner_id:
        return True

    license_type = parse_license_type(content.license_type)
    if license_type == LicenseType.FREE:
        return True
    if license_type in GRANT_MEDIATED_LICENSES:
        return has_approved_grant
    if license_type == LicenseType.NONE:
        return False

    logger.warning(f"Unrecognized license type {content.license_type!r} on content {content.id}; denying access")
    return False


def decide_download(user_id: int, content: ContentItem, has_access: bool) -> bool:
    """Pure download decision given the access decision."""
    return has_access and (bool(content.allow_download) or user_id == content.owner_id)


def needs_grant_lookup(user_id: int, content: ContentItem) -> bool:
    return user_id != content.owner_id and parse_license_type(content.license_type) in GRANT_MEDIATED_LICENSES


class AccessResolver:
    """Resolves access decisions against the persisted license requests."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def has_approved_grant(self, user_id: int, content_id: int) -> bool:
        result = await self.db.execute(
            select(LicenseRequest.id)
            .where(
                LicenseRequest.content_id == content_id,
                LicenseRequest.requester_id == user_id,
                LicenseRequest.status == RequestStatus.APPROVED.value,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def can_access(self, user: User, content: ContentItem) -> bool:
        has_grant = False
        if needs_grant_lookup(user.id, content):
            has_grant = await self.has_approved_grant(user.id, content.id)
        return decide_access(user.id, content, has_grant)

    async def can_download(self, user: User, content: ContentItem) -> bool:
        return decide_download(user.id, content, await self.can_access(user, content))

    async def get_content(self, content_id: int) -> ContentItem:
        content = await self.db.get(ContentItem, content_id)
        if content is None:
            raise ContentNotFoundError(content_id)
        return content

    async def resolve(self, user: User, content_id: int) -> AccessDecision:
        """
        Resolve both decisions for a content id.

        Raises:
            ContentNotFoundError: If the content item does not exist
        """
        content = await self.get_content(content_id)
        has_access = await self.can_access(user, content)
        return AccessDecision(
            content_id=content.id,
            can_access=has_access,
            can_download=decide_download(user.id, content, has_access),
        )

    async def annotate_access(self, user: User, contents: list[ContentItem]) -> list[dict[str, Any]]:
        """
        Return each item as plain data with a ``user_has_access`` field.

        Every item gets its own dict and its own decision.
        """
        annotated = []
        for content in contents:
            data = ContentResponse.model_validate(content).model_dump()
            data["user_has_access"] = await self.can_access(user, content)
            annotated.append(data)
        return annotated
