"""
User (principal) repository.

Besides plain lookups this handles the SSO provisioning step: the first
login through the identity provider creates the user record, later logins
refresh the mapped role and linkage fields.
"""

import logging
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from .base import BaseRepository, ConflictError, require_identifier
from ..model.auth import User

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email)

    def find_by_azure_ad_id(self, azure_ad_id: str) -> Optional[User]:
        return self.find_one_by(azure_ad_id=azure_ad_id)

    def create_user(
        self,
        email: str,
        name: str,
        role: Optional[str] = None,
        department: Optional[str] = None,
    ) -> User:
        require_identifier("email", email)
        user = User(email=email, name=name, role=role, department=department, is_sso_user=False)
        return self.create(user, conflict_message="User with this email already exists")

    def upsert_sso_user(
        self,
        azure_ad_id: str,
        email: str,
        name: str,
        role: str,
        department: Optional[str] = None,
    ) -> Tuple[User, bool]:
        """
        Create or update the user behind an SSO login.

        The user is matched on the identity provider id first, then on email
        so that an existing password account gets linked instead of duplicated.

        Returns:
            (user, created) tuple

        Raises:
            ConflictError: If the provider id and the email belong to two different users
        """
        require_identifier("azure_ad_id", azure_ad_id)
        require_identifier("email", email)

        linked = self.find_by_azure_ad_id(azure_ad_id)
        by_email = self.find_by_email(email)
        if linked is not None and by_email is not None and linked.id != by_email.id:
            logger.warning(f"SSO id {azure_ad_id} is linked to user {linked.id} but {email} belongs to user {by_email.id}")
            raise ConflictError(self.entity_name, "SSO identity is linked to a different user than its email")
        user = linked or by_email

        fields = {
            "azure_ad_id": azure_ad_id,
            "email": email,
            "name": name or email,
            "role": role,
            "department": department or None,
            "is_sso_user": True,
        }

        if user is None:
            user = self.create(User(**fields), conflict_message="SSO user already exists")
            logger.info(f"Provisioned SSO user {user.id} with role '{role}'")
            return user, True

        user = self.apply_updates(user, fields)
        logger.info(f"Refreshed SSO user {user.id} with role '{role}'")
        return user, False
