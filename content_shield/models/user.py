from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from content_shield.constants.roles import RoleName, is_admin_role
from content_shield.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    role = Column(String(20), default=RoleName.USER.value, nullable=False)  # "user" or "admin"
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
