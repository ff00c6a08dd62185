"""
LicenseRequest Model

A license request mediates non-owner access to permission- or paid-licensed
content. An approved request is the access grant; approved and rejected
requests are terminal.

A partial unique index allows at most one *pending* request per
(content, requester) pair, so concurrent duplicate requests fail at the
database instead of producing two pending rows.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship

from content_shield.constants.licensing import RequestStatus
from content_shield.database import Base


class LicenseRequest(Base):
    """Request for access to a content item"""

    __tablename__ = "license_requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    content_id = Column(Integer, ForeignKey("content_items.id"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), default=RequestStatus.PENDING.value, nullable=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime, nullable=True)

    content = relationship("ContentItem")
    requester = relationship("User", foreign_keys=[requester_id])
    owner = relationship("User", foreign_keys=[owner_id])

    __table_args__ = (
        Index("ix_license_requests_grant_lookup", "content_id", "requester_id", "status"),
        Index(
            "uq_license_requests_pending_pair",
            "content_id",
            "requester_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<LicenseRequest(id={self.id}, content={self.content_id}, "
            f"requester={self.requester_id}, status={self.status})>"
        )
