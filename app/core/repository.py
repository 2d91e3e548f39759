"""Base repository pattern implementation.

Stores for each domain inherit from ``BaseRepository`` and add their own
query methods. Helpers here only flush; each store commits at the end of
its own mutating operations.
"""

from typing import Generic, TypeVar, cast
from uuid import UUID

from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with common persistence operations.

    Example:
        ```python
        class UserDirectory(BaseRepository[User]):
            def __init__(self, db: Session):
                super().__init__(db, User)

            def find_by_email(self, email: str) -> User | None:
                return self.db.query(self.model).filter(self.model.email == email).first()
        ```
    """

    def __init__(self, db: Session, model: type[ModelType]):
        """Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy session.
            model: The model class this repository operates on.
        """
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> ModelType | None:
        """Get a single entity by ID.

        Args:
            entity_id: The UUID of the entity.

        Returns:
            The entity if found, None otherwise.
        """
        result = self.db.get(self.model, entity_id)
        return cast(ModelType | None, result)

    def count(self) -> int:
        result: int = self.db.query(self.model).count()
        return result

    def add(self, instance: ModelType) -> ModelType:
        """Stage a new entity and flush it so database defaults are populated.

        Args:
            instance: The entity to persist.

        Returns:
            The same instance, now with its primary key.
        """
        self.db.add(instance)
        self.db.flush()
        return instance

    def delete(self, instance: ModelType) -> None:
        self.db.delete(instance)
        self.db.flush()

    def rollback(self) -> None:
        """Discard whatever the current unit of work left pending."""
        self.db.rollback()
