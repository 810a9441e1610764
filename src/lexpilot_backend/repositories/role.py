"""
Role registry.

Roles are named permission matrices. Names are globally unique and matched
case-sensitively; the application check is backed by a unique index.
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from .base import BaseRepository, ConflictError, ValidationError
from ..interface.roles import RoleCreate, RoleQuery, RoleUpdate
from ..model.role import Role

logger = logging.getLogger(__name__)

ROLE_NAME_CONFLICT = "Role with this name already exists"


class RoleRepository(BaseRepository[Role]):
    """Repository for Role entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, Role)

    def find_by_name(self, name: str) -> Optional[Role]:
        """
        Find a role by its exact name.

        Args:
            name: Role name (case-sensitive)

        Returns:
            Role if found, None otherwise
        """
        return self.find_one_by(name=name)

    def list_all(self, params: Optional[RoleQuery] = None) -> List[Role]:
        if params is None:
            return self.db.query(Role).order_by(Role.name).all()
        return self.list(
            limit=params.limit,
            offset=params.skip,
            name=params.name,
            is_active=params.is_active,
        )

    def list_active(self) -> List[Role]:
        return self.db.query(Role).filter(Role.is_active.is_(True)).order_by(Role.name).all()

    def create_role(self, data: RoleCreate) -> Role:
        """
        Create a role.

        Raises:
            ConflictError: If a role with the same name exists
        """
        if self.find_by_name(data.name) is not None:
            raise ConflictError(self.entity_name, ROLE_NAME_CONFLICT)

        role = Role(
            name=data.name,
            description=data.description,
            permissions=data.permissions,
            is_active=data.is_active,
        )
        role = self.create(role, conflict_message=ROLE_NAME_CONFLICT)
        logger.info(f"Created role '{role.name}' ({role.id})")
        return role

    def update_role(self, role_id: str, patch: RoleUpdate) -> Role:
        """
        Update a role with the fields set on `patch`.

        Raises:
            ValidationError: If the patch sets no field
            NotFoundError: If the role does not exist
            ConflictError: If the new name belongs to another role
        """
        updates = patch.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationError("No fields to update")
        for field in ("name", "permissions", "is_active"):
            if field in updates and updates[field] is None:
                raise ValidationError(f"Role {field} cannot be null")

        role = self.get_by_id(role_id)

        new_name = updates.get("name")
        if new_name is not None:
            existing = self.find_by_name(new_name)
            if existing is not None and existing.id != role.id:
                raise ConflictError(self.entity_name, ROLE_NAME_CONFLICT)

        role = self.apply_updates(role, updates, conflict_message=ROLE_NAME_CONFLICT)
        logger.info(f"Updated role {role.id}: {sorted(updates)}")
        return role

    def delete_role(self, role_id: str) -> bool:
        """Hard delete a role together with its assignments."""
        deleted = self.delete(role_id)
        if deleted:
            logger.info(f"Deleted role {role_id}")
        return deleted
