"""
Tests for the license request workflow
"""

import pytest
from sqlalchemy.exc import IntegrityError

from content_shield.constants.licensing import LicenseType, RequestStatus, can_transition
from content_shield.exceptions import (
    ContentNotFoundError,
    InvalidOperationError,
    InvalidStateTransitionError,
    LicenseRequestNotFoundError,
    PendingRequestExistsError,
    PermissionDeniedError,
)
from content_shield.models.license_request import LicenseRequest
from content_shield.services.access_resolver import AccessResolver
from content_shield.services.license_service import LicenseService


class TestTransitions:
    @pytest.mark.parametrize(
        ("current", "target", "expected"),
        [
            ("pending", "approved", True),
            ("pending", "rejected", True),
            ("pending", "pending", False),
            ("approved", "rejected", False),
            ("approved", "pending", False),
            ("rejected", "approved", False),
            ("bogus", "approved", False),
            ("pending", "bogus", False),
        ],
    )
    def test_can_transition(self, current, target, expected):
        assert can_transition(current, target) is expected


class TestLicenseWorkflow:
    """Test request -> approve -> access end to end"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("license_type", [LicenseType.PERMISSION, LicenseType.PAID])
    async def test_approval_grants_access(self, test_db, test_user, other_user, make_content, license_type):
        content = await make_content(test_user, license_type)
        service = LicenseService(test_db)
        resolver = AccessResolver(test_db)

        request = await service.request_license(other_user, content.id)
        assert request.status == "pending"
        assert request.owner_id == test_user.id
        assert await resolver.can_access(other_user, content) is False

        approved = await service.resolve_request(test_user, request.id, "approved")
        assert approved.status == "approved"
        assert approved.updated_at is not None
        assert await resolver.can_access(other_user, content) is True

    @pytest.mark.asyncio
    async def test_rejection_keeps_content_closed(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)
        service = LicenseService(test_db)

        request = await service.request_license(other_user, content.id)
        await service.resolve_request(test_user, request.id, RequestStatus.REJECTED)

        assert await AccessResolver(test_db).can_access(other_user, content) is False

    @pytest.mark.asyncio
    async def test_new_request_allowed_after_rejection(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)
        service = LicenseService(test_db)
        first = await service.request_license(other_user, content.id)
        await service.resolve_request(test_user, first.id, "rejected")

        second = await service.request_license(other_user, content.id)

        assert second.id != first.id
        assert second.status == "pending"


class TestRequestLicenseGuards:
    @pytest.mark.asyncio
    async def test_missing_content(self, test_db, other_user):
        with pytest.raises(ContentNotFoundError):
            await LicenseService(test_db).request_license(other_user, 404)

    @pytest.mark.asyncio
    async def test_own_content(self, test_db, test_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)

        with pytest.raises(InvalidOperationError, match="your own content"):
            await LicenseService(test_db).request_license(test_user, content.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("license_type", [LicenseType.FREE, LicenseType.NONE])
    async def test_license_type_without_requests(self, test_db, test_user, other_user, make_content, license_type):
        content = await make_content(test_user, license_type)

        with pytest.raises(InvalidOperationError):
            await LicenseService(test_db).request_license(other_user, content.id)

    @pytest.mark.asyncio
    async def test_second_pending_request_rejected(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)
        service = LicenseService(test_db)
        await service.request_license(other_user, content.id)

        with pytest.raises(PendingRequestExistsError) as exc_info:
            await service.request_license(other_user, content.id)

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_database_allows_one_pending_row_per_pair(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)
        for _ in range(2):
            test_db.add(
                LicenseRequest(
                    content_id=content.id, requester_id=other_user.id, owner_id=test_user.id, status="pending"
                )
            )

        with pytest.raises(IntegrityError):
            await test_db.commit()
        await test_db.rollback()

    @pytest.mark.asyncio
    async def test_database_allows_many_resolved_rows_per_pair(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)
        for status in ("rejected", "rejected", "approved"):
            test_db.add(
                LicenseRequest(content_id=content.id, requester_id=other_user.id, owner_id=test_user.id, status=status)
            )

        await test_db.commit()


class TestResolveRequestGuards:
    @pytest.fixture
    async def pending_request(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PERMISSION)
        return await LicenseService(test_db).request_license(other_user, content.id)

    @pytest.mark.asyncio
    async def test_only_owner_can_resolve(self, test_db, other_user, test_admin, pending_request):
        service = LicenseService(test_db)

        with pytest.raises(PermissionDeniedError):
            await service.resolve_request(other_user, pending_request.id, "approved")
        with pytest.raises(PermissionDeniedError):
            await service.resolve_request(test_admin, pending_request.id, "approved")

    @pytest.mark.asyncio
    async def test_resolved_request_is_terminal(self, test_db, test_user, pending_request):
        service = LicenseService(test_db)
        await service.resolve_request(test_user, pending_request.id, "approved")

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await service.resolve_request(test_user, pending_request.id, "rejected")

        assert exc_info.value.details["current_status"] == "approved"
        refreshed = await service.get_request(pending_request.id)
        assert refreshed.status == "approved"

    @pytest.mark.asyncio
    async def test_cannot_move_back_to_pending(self, test_db, test_user, pending_request):
        with pytest.raises(InvalidStateTransitionError):
            await LicenseService(test_db).resolve_request(test_user, pending_request.id, "pending")

    @pytest.mark.asyncio
    async def test_missing_request(self, test_db, test_user):
        with pytest.raises(LicenseRequestNotFoundError):
            await LicenseService(test_db).resolve_request(test_user, 404, "approved")


class TestRequestListings:
    @pytest.mark.asyncio
    async def test_received_and_sent(self, test_db, test_user, other_user, make_content):
        content = await make_content(test_user, LicenseType.PAID, title="Premium")
        service = LicenseService(test_db)
        request = await service.request_license(other_user, content.id)

        received = await service.get_received(test_user)
        sent = await service.get_sent(other_user)

        assert [r["id"] for r in received] == [request.id]
        assert received[0]["content_title"] == "Premium"
        assert received[0]["requester_email"] == other_user.email
        assert [r["id"] for r in sent] == [request.id]
        assert sent[0]["owner_email"] == test_user.email
        assert await service.get_received(other_user) == []
        assert await service.get_sent(test_user) == []


class TestConcurrentResolution:
    """Two sessions resolving the same request"""

    @pytest.mark.asyncio
    async def test_stale_rejection_cannot_overwrite_approval(self, file_session_maker, shared_users, shared_content):
        owner, viewer = shared_users.owner, shared_users.viewer
        async with file_session_maker() as setup:
            content = await shared_content(setup, owner, LicenseType.PERMISSION)
            request = await LicenseService(setup).request_license(viewer, content.id)

        async with file_session_maker() as first, file_session_maker() as second:
            stale = LicenseService(second)
            assert (await stale.get_request(request.id)).status == "pending"

            await LicenseService(first).resolve_request(owner, request.id, "approved")

            with pytest.raises(InvalidStateTransitionError) as exc_info:
                await stale.resolve_request(owner, request.id, "rejected")
            assert exc_info.value.details["current_status"] == "approved"

        async with file_session_maker() as check:
            assert (await LicenseService(check).get_request(request.id)).status == "approved"
            assert await AccessResolver(check).can_access(viewer, content)
