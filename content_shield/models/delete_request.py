from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from content_shield.constants.licensing import RequestStatus
from content_shield.database import Base


class DeleteRequest(Base):
    """Owner's request for an admin to remove a content item"""

    __tablename__ = "delete_requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    content_id = Column(Integer, ForeignKey("content_items.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reason = Column(Text, nullable=True)
    status = Column(String(20), default=RequestStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime, nullable=True)

    content = relationship("ContentItem")
    user = relationship("User")

    def __repr__(self):
        return f"<DeleteRequest(id={self.id}, content={self.content_id}, status={self.status})>"
