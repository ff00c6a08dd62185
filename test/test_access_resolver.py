"""
Tests for the access resolver

Covers the full license decision table, download gating, grant scoping and
feed annotation.
"""

import logging
from types import SimpleNamespace

import pytest

from content_shield.constants.licensing import LicenseType, RequestStatus
from content_shield.exceptions import ContentNotFoundError
from content_shield.services.access_resolver import AccessResolver, decide_access, decide_download

OWNER_ID = 1
VIEWER_ID = 2


def content_stub(license_type: str, allow_download: bool = False):
    return SimpleNamespace(id=10, owner_id=OWNER_ID, license_type=license_type, allow_download=allow_download)


class TestDecisionTable:
    """Test the pure access and download decisions"""

    @pytest.mark.parametrize(
        ("license_type", "has_grant", "expected"),
        [
            ("free", False, True),
            ("free", True, True),
            ("permission", False, False),
            ("permission", True, True),
            ("paid", False, False),
            ("paid", True, True),
            ("none", False, False),
            ("none", True, False),
            ("mystery", True, False),
        ],
    )
    def test_non_owner(self, license_type, has_grant, expected):
        assert decide_access(VIEWER_ID, content_stub(license_type), has_grant) is expected

    @pytest.mark.parametrize("license_type", ["free", "permission", "paid", "none", "mystery"])
    def test_owner_always_has_access(self, license_type):
        assert decide_access(OWNER_ID, content_stub(license_type), False) is True

    def test_unknown_license_type_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="content_shield.services.access_resolver"):
            assert decide_access(VIEWER_ID, content_stub("exclusive"), True) is False

        assert "exclusive" in caplog.text

    @pytest.mark.parametrize(
        ("user_id", "allow_download", "has_access", "expected"),
        [
            (VIEWER_ID, True, True, True),
            (VIEWER_ID, False, True, False),
            (VIEWER_ID, True, False, False),
            (OWNER_ID, False, True, True),
        ],
    )
    def test_download(self, user_id, allow_download, has_access, expected):
        content = content_stub("free", allow_download=allow_download)
        assert decide_download(user_id, content, has_access) is expected


class TestAccessResolver:
    """Test decisions against persisted license requests"""

    @pytest.mark.asyncio
    async def test_free_content_is_open(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.FREE)

        assert await AccessResolver(test_db).can_access(other_user, content) is True

    @pytest.mark.asyncio
    async def test_none_content_is_owner_only(self, test_db, test_user, other_user, make_content, grant_license):
        content = await make_content(test_user, LicenseType.NONE)
        # A stray approved row never opens "none" content
        await grant_license(content, other_user, RequestStatus.APPROVED)

        resolver = AccessResolver(test_db)
        assert await resolver.can_access(test_user, content) is True
        assert await resolver.can_access(other_user, content) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("license_type", [LicenseType.PERMISSION, LicenseType.PAID])
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (None, False),
            (RequestStatus.PENDING, False),
            (RequestStatus.REJECTED, False),
            (RequestStatus.APPROVED, True),
        ],
    )
    async def test_grant_mediated_content(
        self, test_db, test_user, other_user, make_content, grant_license, license_type, status, expected
    ):
        content = await make_content(test_user, license_type)
        if status is not None:
            await grant_license(content, other_user, status)

        assert await AccessResolver(test_db).can_access(other_user, content) is expected

    @pytest.mark.asyncio
    async def test_grant_is_scoped_to_content_and_user(
        self, test_db, test_user, other_user, test_admin, make_content, grant_license
    ):
        granted = await make_content(test_user, LicenseType.PERMISSION)
        other = await make_content(test_user, LicenseType.PERMISSION)
        await grant_license(granted, other_user)

        resolver = AccessResolver(test_db)
        assert await resolver.can_access(other_user, granted) is True
        assert await resolver.can_access(other_user, other) is False
        assert await resolver.can_access(test_admin, granted) is False

    @pytest.mark.asyncio
    async def test_unknown_license_type_fails_closed(self, test_db, test_user, other_user, make_content, grant_license):
        content = await make_content(test_user, LicenseType.PERMISSION)
        await grant_license(content, other_user)
        content.license_type = "exclusive"
        await test_db.commit()

        resolver = AccessResolver(test_db)
        assert await resolver.can_access(other_user, content) is False
        assert await resolver.can_access(test_user, content) is True

    @pytest.mark.asyncio
    async def test_can_download_requires_flag_for_non_owner(self, test_db, test_user, other_user, make_content):
        locked = await make_content(test_user, LicenseType.FREE, allow_download=False)
        open_ = await make_content(test_user, LicenseType.FREE, allow_download=True)

        resolver = AccessResolver(test_db)
        assert await resolver.can_download(other_user, locked) is False
        assert await resolver.can_download(other_user, open_) is True
        assert await resolver.can_download(test_user, locked) is True

    @pytest.mark.asyncio
    async def test_can_download_requires_access(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION, allow_download=True)

        assert await AccessResolver(test_db).can_download(other_user, content) is False

    @pytest.mark.asyncio
    async def test_resolve(self, test_db, test_user, other_user, make_content, grant_license):
        content = await make_content(test_user, LicenseType.PAID, allow_download=True)
        await grant_license(content, other_user)

        decision = await AccessResolver(test_db).resolve(other_user, content.id)

        assert decision.content_id == content.id
        assert decision.can_access is True
        assert decision.can_download is True

    @pytest.mark.asyncio
    async def test_resolve_missing_content(self, test_db, other_user):
        with pytest.raises(ContentNotFoundError):
            await AccessResolver(test_db).resolve(other_user, 9999)

    @pytest.mark.asyncio
    async def test_decisions_are_not_cached(self, test_db, test_user, other_user, make_content, grant_license):
        content = await make_content(test_user, LicenseType.PERMISSION)
        resolver = AccessResolver(test_db)

        assert await resolver.can_access(other_user, content) is False
        await grant_license(content, other_user)
        assert await resolver.can_access(other_user, content) is True


class TestAnnotateAccess:
    @pytest.mark.asyncio
    async def test_annotates_each_item(self, test_db, test_user, other_user, make_content, grant_license):
        free = await make_content(test_user, LicenseType.FREE, title="Free")
        closed = await make_content(test_user, LicenseType.NONE, title="Closed")
        granted = await make_content(test_user, LicenseType.PERMISSION, title="Granted")
        pending = await make_content(test_user, LicenseType.PAID, title="Pending")
        await grant_license(granted, other_user)
        await grant_license(pending, other_user, RequestStatus.PENDING)

        annotated = await AccessResolver(test_db).annotate_access(other_user, [free, closed, granted, pending])

        assert [item["title"] for item in annotated] == ["Free", "Closed", "Granted", "Pending"]
        assert [item["user_has_access"] for item in annotated] == [True, False, True, False]
        assert annotated[0]["owner"]["email"] == test_user.email

    @pytest.mark.asyncio
    async def test_owner_sees_all_own_items(self, test_db, test_user, make_content):
        items = [await make_content(test_user, license_type) for license_type in LicenseType]

        annotated = await AccessResolver(test_db).annotate_access(test_user, items)

        assert all(item["user_has_access"] for item in annotated)

    @pytest.mark.asyncio
    async def test_empty_list(self, test_db, test_user):
        assert await AccessResolver(test_db).annotate_access(test_user, []) == []
