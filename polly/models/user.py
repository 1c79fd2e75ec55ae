from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from polly.core.constants import AuthConfig
from polly.db.constraints import USER_EMAIL
from polly.db.database import Base


# Define the User model
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=AuthConfig.ROLE_USER)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationship to Poll model (one user can own many polls)
    polls = relationship("Poll", back_populates="owner", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint(*USER_EMAIL.columns, name=USER_EMAIL.name),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == AuthConfig.ROLE_ADMIN


class RevokedToken(Base):
    """Sign-out blocklist: a token whose jti is listed here no longer authenticates."""

    __tablename__ = "revoked_tokens"

    jti = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    revoked_at = Column(DateTime, default=func.now(), nullable=False)
