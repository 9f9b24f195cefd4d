"""User, Role and Permission models."""
import enum
import uuid

from sqlalchemy import Column, String, DateTime, Table, ForeignKey, Text, Enum
from sqlalchemy.orm import relationship

from fieldops.database import Base
from fieldops.db.types import GUID
from fieldops.utils.time import utcnow


class UserStatus(str, enum.Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


# Association table for User-Role many-to-many relationship
user_role_association = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", GUID(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", GUID(), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

# Association table for Role-Permission many-to-many relationship
role_permission_association = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", GUID(), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "permission_id",
        GUID(),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

# Permissions granted to a user directly, outside any role
user_permission_association = Table(
    "user_permissions",
    Base.metadata,
    Column("user_id", GUID(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "permission_id",
        GUID(),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=True)
    department = Column(String(100), nullable=True, index=True)
    position = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    status = Column(
        Enum(UserStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    roles = relationship(
        "Role",
        secondary=user_role_association,
        lazy="selectin",
    )
    permissions = relationship(
        "Permission",
        secondary=user_permission_association,
        lazy="selectin",
    )
    tokens = relationship(
        "AccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class Role(Base):
    """Role model aggregating permissions."""

    __tablename__ = "roles"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    permissions = relationship(
        "Permission",
        secondary=role_permission_association,
        lazy="selectin",
    )


class Permission(Base):
    """Named permission."""

    __tablename__ = "permissions"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

