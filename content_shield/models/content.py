"""
Content Model

A content item is an uploaded file plus its license policy. The file is
stored under a key derived from the SHA-256 fingerprint of its bytes, and the
fingerprint column is unique so byte-identical uploads cannot be registered
twice.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from content_shield.database import Base


class ContentItem(Base):
    """Uploaded content with license metadata"""

    __tablename__ = "content_items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True, default="")

    # License policy; immutable once created
    license_type = Column(String(20), nullable=False)  # free, paid, permission, none
    allow_download = Column(Boolean, default=False, nullable=False)
    price = Column(Integer, nullable=True)  # minor currency units, paid content only

    # Storage
    file_path = Column(String, nullable=False)  # blob key
    thumbnail_path = Column(String, nullable=True)  # blob key, images only
    content_type = Column(String, nullable=False)
    content_hash = Column(String(64), nullable=False, unique=True)

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Engagement counters
    like_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    owner = relationship("User", lazy="joined")

    __table_args__ = (
        Index("ix_content_items_owner_id", "owner_id"),
        Index("ix_content_items_created_at", "created_at"),
        Index("ix_content_items_like_count", "like_count"),
    )

    def __repr__(self):
        return f"<ContentItem(id={self.id}, title={self.title}, license={self.license_type})>"
