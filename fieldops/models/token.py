"""Personal access token registry."""
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from fieldops.database import Base
from fieldops.db.types import GUID
from fieldops.utils.time import utcnow


class AccessToken(Base):
    """One row per issued bearer token.

    A signed JWT is only honoured while its ``jti`` has a row here, so
    deleting rows revokes tokens.
    """

    __tablename__ = "personal_access_tokens"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False, default="auth_token")
    jti = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="tokens")
