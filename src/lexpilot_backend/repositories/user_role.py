"""
Assignment store: many-to-many links between users and roles.

A (user, role) pair has at most one assignment record. A deactivated record
still blocks re-assignment; it has to be deleted first.
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from .base import BaseRepository, ConflictError, NotFoundError, ValidationError, require_identifier
from ..interface.user_roles import UserRoleCreate, UserRoleUpdate
from ..model.auth import User
from ..model.role import Role, UserRole

logger = logging.getLogger(__name__)

ASSIGNMENT_CONFLICT = "User already has this role assigned"


class UserRoleRepository(BaseRepository[UserRole]):
    """Repository for UserRole (assignment) database operations."""

    def __init__(self, db: Session):
        super().__init__(db, UserRole)

    def _require_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def _require_role(self, role_id: str) -> Role:
        role = self.db.query(Role).filter(Role.id == role_id).first()
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    def find_by_user_and_role(self, user_id: str, role_id: str) -> Optional[UserRole]:
        return self.find_one_by(user_id=user_id, role_id=role_id)

    def assign(self, data: UserRoleCreate) -> UserRole:
        """
        Assign a role to a user.

        Raises:
            ValidationError: If user_id or role_id is missing
            NotFoundError: If the user, the role or the assigner does not exist
            ConflictError: If any assignment for the pair exists, active or not
        """
        require_identifier("user_id", data.user_id)
        require_identifier("role_id", data.role_id)
        self._require_user(data.user_id)
        self._require_role(data.role_id)
        if data.assigned_by is not None:
            self._require_user(data.assigned_by)

        if self.find_by_user_and_role(data.user_id, data.role_id) is not None:
            raise ConflictError(self.entity_name, ASSIGNMENT_CONFLICT)

        assignment = UserRole(
            user_id=data.user_id,
            role_id=data.role_id,
            assigned_by=data.assigned_by,
            is_active=True,
        )
        # The unique constraint catches a concurrent insert that passed the check above
        assignment = self.create(assignment, conflict_message=ASSIGNMENT_CONFLICT)
        logger.info(f"Assigned role {data.role_id} to user {data.user_id} (by {data.assigned_by})")
        return assignment

    def list_all(self) -> List[UserRole]:
        return self.db.query(UserRole).options(joinedload(UserRole.role)).all()

    def list_by_user(self, user_id: str) -> List[UserRole]:
        self._require_user(user_id)
        return (
            self.db.query(UserRole)
            .options(joinedload(UserRole.role))
            .filter(UserRole.user_id == user_id)
            .all()
        )

    def list_active_by_user(self, user_id: str) -> List[UserRole]:
        """Assignments that currently contribute permissions: both the link and the role are active."""
        self._require_user(user_id)
        return (
            self.db.query(UserRole)
            .join(Role, Role.id == UserRole.role_id)
            .options(joinedload(UserRole.role))
            .filter(
                UserRole.user_id == user_id,
                UserRole.is_active.is_(True),
                Role.is_active.is_(True),
            )
            .all()
        )

    def list_by_role(self, role_id: str) -> List[UserRole]:
        self._require_role(role_id)
        return self.find_by(role_id=role_id)

    def update_assignment(self, assignment_id: str, patch: UserRoleUpdate) -> UserRole:
        """
        Toggle activation or change the assigner without touching the audit trail.

        Raises:
            ValidationError: If the payload is empty
            NotFoundError: If the assignment or the new assigner does not exist
        """
        updates = patch.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationError("No fields to update")
        if "is_active" in updates and updates["is_active"] is None:
            raise ValidationError("is_active cannot be null")

        assignment = self.get_by_id(assignment_id)
        if updates.get("assigned_by") is not None:
            self._require_user(updates["assigned_by"])
        return self.apply_updates(assignment, updates)

    def remove(self, assignment_id: str) -> bool:
        deleted = self.delete(assignment_id)
        if deleted:
            logger.info(f"Removed assignment {assignment_id}")
        return deleted

    def remove_by_pair(self, user_id: str, role_id: str) -> bool:
        assignment = self.find_by_user_and_role(user_id, role_id)
        if assignment is None:
            return False
        return self.remove(assignment.id)
