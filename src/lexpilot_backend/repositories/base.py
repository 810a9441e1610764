"""
Base repository pattern implementation.

This module provides the abstract base class for the role, assignment,
override and user stores, together with the error taxonomy they raise.
"""

import logging
from abc import ABC
from typing import TypeVar, Generic, List, Optional, Dict, Any, Type
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

# Type variable for generic entity type
T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} not found: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(RepositoryError):
    """Exception raised when a write would violate a uniqueness rule."""

    def __init__(self, entity_type: str, message: str):
        super().__init__(message)
        self.entity_type = entity_type
        self.message = message


class ValidationError(RepositoryError):
    """Exception raised for missing identifiers or empty payloads."""
    pass


def require_identifier(name: str, value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return value


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Every write commits on success and rolls back on failure, so callers
    never observe a half-applied operation.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def get_by_id(self, entity_id: Any) -> T:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found
        """
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """Get entity by ID, returning None if not found."""
        if entity_id is None:
            return None
        return self.db.query(self.model).filter(
            self.model.id == entity_id
        ).first()

    def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        **filters
    ) -> List[T]:
        """
        List entities with optional pagination and equality filters.
        Filters with a value of None are ignored.
        """
        query = self.db.query(self.model)

        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all()

    def create(self, entity: T, conflict_message: Optional[str] = None) -> T:
        """
        Persist a new entity.

        Raises:
            ConflictError: If entity violates unique constraints
            RepositoryError: If database operation fails
        """
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity violation creating {self.entity_name}: {e.orig}")
            raise ConflictError(
                self.entity_name,
                conflict_message or f"{self.entity_name} already exists"
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to create {self.entity_name}: {str(e)}")

    def apply_updates(self, entity: T, updates: Dict[str, Any], conflict_message: Optional[str] = None) -> T:
        """Apply a dict of field updates to a loaded entity and commit."""
        try:
            for key, value in updates.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)

            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity violation updating {self.entity_name}: {e.orig}")
            raise ConflictError(
                self.entity_name,
                conflict_message or f"{self.entity_name} update violates a uniqueness rule"
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to update {self.entity_name}: {str(e)}")

    def delete(self, entity_id: Any) -> bool:
        """
        Hard delete an entity by ID.

        Returns:
            True if a row was deleted, False if nothing matched
        """
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            return False

        try:
            self.db.delete(entity)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to delete {self.entity_name}: {str(e)}")

    def find_by(self, **criteria) -> List[T]:
        """Find entities by multiple criteria."""
        query = self.db.query(self.model)

        for key, value in criteria.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        return query.all()

    def find_one_by(self, **criteria) -> Optional[T]:
        """Find single entity by criteria."""
        query = self.db.query(self.model)

        for key, value in criteria.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        return query.first()

    def count(self, **criteria) -> int:
        """Count entities matching criteria."""
        query = self.db.query(self.model)

        for key, value in criteria.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        return query.count()
