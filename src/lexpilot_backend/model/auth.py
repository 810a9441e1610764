from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import relationship

from .base import Base, generate_uuid


class User(Base):
    __tablename__ = 'user'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())
    email = Column(String(320), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    # Legacy single-role shortcut (e.g. "admin", "viewer", "legal_admin")
    role = Column(String(255))
    azure_ad_id = Column(String(255), unique=True)
    department = Column(String(255))
    is_sso_user = Column(Boolean, nullable=False, default=False)

    # Relationships
    user_roles = relationship(
        "UserRole",
        foreign_keys="UserRole.user_id",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=True,
        lazy="select"
    )
    permission_overrides = relationship(
        "UserPermission",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=True,
        lazy="select"
    )
