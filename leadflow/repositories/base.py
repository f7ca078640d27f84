"""Base repository with common CRUD operations."""
from typing import TypeVar, Generic, Type, Optional, Dict, Any
from sqlalchemy.orm import Session
from uuid import UUID

from leadflow.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common database operations."""

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create new record.

        Args:
            obj_in: Dictionary with object data

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def get(self, id: UUID) -> Optional[ModelType]:
        """Get record by ID, or None if not found."""
        return self.db.query(self.model).filter(self.model.id == id).first()

    def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """Get the first record whose *field* equals *value*."""
        if not hasattr(self.model, field):
            raise ValueError(f"{self.model.__name__} has no field '{field}'")
        return self.db.query(self.model).filter(getattr(self.model, field) == value).first()

    def update(self, id: UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update record.

        Args:
            id: Record UUID
            obj_in: Dictionary with fields to update

        Returns:
            Updated model instance or None if not found
        """
        db_obj = self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def delete(self, id: UUID) -> bool:
        """Delete record. Returns False if it does not exist."""
        db_obj = self.get(id)
        if not db_obj:
            return False

        self.db.delete(db_obj)
        self.db.commit()
        return True
