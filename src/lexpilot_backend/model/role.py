from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from .base import Base, generate_uuid


class Role(Base):
    __tablename__ = 'role'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    # resource -> action -> bool
    permissions = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user_roles = relationship('UserRole', back_populates='role', cascade='all, delete-orphan')


class UserRole(Base):
    __tablename__ = 'user_role'
    __table_args__ = (
        UniqueConstraint('user_id', 'role_id', name='uq_user_role_user_id_role_id'),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    role_id = Column(ForeignKey('role.id', ondelete='CASCADE'), nullable=False, index=True)
    assigned_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    assigned_at = Column(DateTime(True), nullable=False, server_default=func.now())
    is_active = Column(Boolean, nullable=False, default=True)

    role = relationship('Role', back_populates='user_roles')
    user = relationship('User', foreign_keys=[user_id], back_populates='user_roles')
    assigner = relationship('User', foreign_keys=[assigned_by])


class UserPermission(Base):
    __tablename__ = 'user_permission'
    __table_args__ = (
        UniqueConstraint('user_id', 'permission_key', name='uq_user_permission_user_id_permission_key'),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    permission_key = Column(String(255), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    user = relationship('User', back_populates='permission_overrides')
