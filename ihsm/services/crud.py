"""Generic CRUD service with owner checks and validation."""

from __future__ import annotations

from typing import Any, Type, TypeVar

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ihsm.extensions import db

Model = TypeVar("Model", bound=db.Model)

PROTECTED_FIELDS = ('id', 'created_at', 'updated_at', 'owner_id')


class CRUDService:
    """Base CRUD service with common operations."""

    def __init__(self, model: Type[Model]):
        """
        Initialize CRUD service.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model
        self.model_name = model.__tablename__.replace('_', ' ')

    def create(self, data: dict[str, Any], owner_id: str | None = None) -> tuple[Model | None, str | None]:
        """
        Create a new record.

        Args:
            data: Dictionary of field values
            owner_id: Identity recorded as the owner of the new record

        Returns:
            (created_object, error_message)
        """
        try:
            error = self._validate_create(data)
            if error:
                return None, error

            instance = self.model(**data)
            if owner_id is not None and hasattr(instance, 'owner_id'):
                instance.owner_id = owner_id
            db.session.add(instance)
            db.session.commit()
            current_app.logger.info(f"{self.model_name} {instance.id} created by {owner_id}")
            return instance, None

        except IntegrityError as e:
            db.session.rollback()
            return None, self._handle_integrity_error(e)

        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to create {self.model_name}: {e}")
            return None, f"Failed to create {self.model_name}"

    def get_by_id(self, object_id: str) -> Model | None:
        """Get record by ID."""
        return db.session.get(self.model, object_id)

    def update(self, object_id: str, data: dict[str, Any], owner_id: str | None = None) -> tuple[bool, str | None]:
        """
        Update a record.

        Args:
            object_id: ID of object to update
            data: Dictionary of fields to update
            owner_id: Identity performing the update; must own the record

        Returns:
            (success, error_message)
        """
        try:
            instance = self.get_by_id(object_id)
            if not instance:
                return False, f"{self.model_name.capitalize()} not found"

            if not self._owned_by(instance, owner_id):
                return False, f"You do not have permission to modify this {self.model_name}"

            error = self._validate_update(instance, data)
            if error:
                return False, error

            for key, value in data.items():
                if hasattr(instance, key) and key not in PROTECTED_FIELDS:
                    setattr(instance, key, value)

            db.session.commit()
            current_app.logger.info(f"{self.model_name} {object_id} updated by {owner_id}")
            return True, None

        except IntegrityError as e:
            db.session.rollback()
            return False, self._handle_integrity_error(e)

        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to update {self.model_name}: {e}")
            return False, f"Failed to update {self.model_name}"

    def delete(self, object_id: str, owner_id: str | None = None) -> tuple[bool, str | None]:
        """
        Delete a record.

        Args:
            object_id: ID of object to delete
            owner_id: Identity performing the delete; must own the record

        Returns:
            (success, error_message)
        """
        try:
            instance = self.get_by_id(object_id)
            if not instance:
                return False, f"{self.model_name.capitalize()} not found"

            if not self._owned_by(instance, owner_id):
                return False, f"You do not have permission to delete this {self.model_name}"

            db.session.delete(instance)
            db.session.commit()
            current_app.logger.info(f"{self.model_name} {object_id} deleted by {owner_id}")
            return True, None

        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to delete {self.model_name}: {e}")
            return False, f"Failed to delete {self.model_name}"

    def _owned_by(self, instance: Model, owner_id: str | None) -> bool:
        if owner_id is None or not hasattr(instance, 'owner_id'):
            return True
        return instance.owner_id == owner_id

    def _validate_create(self, data: dict[str, Any]) -> str | None:
        """
        Validate data for creation.
        Override in subclasses for model-specific validation.
        """
        return None

    def _validate_update(self, instance: Model, data: dict[str, Any]) -> str | None:
        """
        Validate data for update.
        Override in subclasses for model-specific validation.
        """
        return None

    def _handle_integrity_error(self, error: IntegrityError) -> str:
        """Convert database integrity errors to user-friendly messages."""
        error_msg = str(error)
        if 'unique' in error_msg.lower():
            return "A record with these values already exists"
        if 'foreign' in error_msg.lower():
            return "Referenced record does not exist"
        return "Database constraint violation"


def is_not_found(error: str | None) -> bool:
    return bool(error) and error.endswith("not found")


def is_forbidden(error: str | None) -> bool:
    return bool(error) and error.startswith("You do not have permission")


__all__ = ['CRUDService', 'is_not_found', 'is_forbidden']
