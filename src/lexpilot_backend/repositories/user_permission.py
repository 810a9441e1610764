"""
Permission override store.

Overrides are opaque route keys (e.g. "analytics") granted to a single user,
independent of roles. A non-empty override set replaces the role based
decision for route access.
"""

import logging
from typing import Iterable, List
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from .base import BaseRepository, ConflictError, NotFoundError, RepositoryError, ValidationError, require_identifier
from ..interface.user_permissions import UserPermissionSet
from ..model.auth import User
from ..model.role import UserPermission

logger = logging.getLogger(__name__)

OVERRIDE_CONFLICT = "Permission already granted"


class UserPermissionRepository(BaseRepository[UserPermission]):
    """Repository for UserPermission (override) database operations."""

    def __init__(self, db: Session):
        super().__init__(db, UserPermission)

    def list_keys(self, user_id: str) -> List[str]:
        rows = (
            self.db.query(UserPermission.permission_key)
            .filter(UserPermission.user_id == user_id)
            .order_by(UserPermission.created_at, UserPermission.permission_key)
            .all()
        )
        return [row[0] for row in rows]

    def replace_all(self, user_id: str, keys: Iterable[str]) -> List[str]:
        """
        Replace the user's overrides with `keys` in a single transaction.

        The user row is locked for the duration so concurrent replaces for the
        same user serialize. On any failure the previous set is restored.

        Raises:
            NotFoundError: If the user does not exist
            RepositoryError: If the replacement fails (nothing is changed)
        """
        require_identifier("user_id", user_id)
        try:
            permission_set = UserPermissionSet(permission_keys=list(keys))
        except PydanticValidationError as e:
            raise ValidationError(str(e))

        try:
            user = (
                self.db.query(User)
                .filter(User.id == user_id)
                .with_for_update()
                .first()
            )
            if user is None:
                raise NotFoundError("User", user_id)

            self.db.query(UserPermission).filter(
                UserPermission.user_id == user_id
            ).delete(synchronize_session=False)

            self.db.add_all([
                UserPermission(user_id=user_id, permission_key=key)
                for key in permission_set.permission_keys
            ])
            self.db.commit()
        except NotFoundError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Replacing overrides for user {user_id} failed, rolled back: {e}")
            raise RepositoryError(f"Failed to replace permissions for user {user_id}: {str(e)}")

        self.db.expire_all()
        logger.info(f"Replaced overrides for user {user_id}: {permission_set.permission_keys}")
        return permission_set.permission_keys

    def add(self, user_id: str, permission_key: str, exist_ok: bool = False) -> UserPermission:
        """
        Grant a single override key.

        Raises:
            ConflictError: If the key is already granted and `exist_ok` is False
        """
        require_identifier("user_id", user_id)
        require_identifier("permission_key", permission_key)

        existing = self.find_one_by(user_id=user_id, permission_key=permission_key)
        if existing is not None:
            if exist_ok:
                return existing
            raise ConflictError(self.entity_name, OVERRIDE_CONFLICT)

        try:
            return self.create(
                UserPermission(user_id=user_id, permission_key=permission_key),
                conflict_message=OVERRIDE_CONFLICT,
            )
        except ConflictError:
            # Lost a race against a concurrent grant of the same key
            if exist_ok:
                return self.find_one_by(user_id=user_id, permission_key=permission_key)
            raise

    def remove(self, user_id: str, permission_key: str) -> bool:
        try:
            deleted = self.db.query(UserPermission).filter(
                UserPermission.user_id == user_id,
                UserPermission.permission_key == permission_key,
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to remove permission {permission_key}: {str(e)}")
        return deleted > 0

    def clear(self, user_id: str) -> int:
        try:
            deleted = self.db.query(UserPermission).filter(
                UserPermission.user_id == user_id
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to clear permissions for user {user_id}: {str(e)}")
        return deleted
