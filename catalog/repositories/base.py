"""Generic repository over one mapped model with string UUID primary keys."""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from catalog.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    CRUD helpers shared by every repository.

    Methods flush but never commit. Services commit once per operation and
    only then invalidate the cache.

        class ImageRepository(BaseRepository[Image]):
            model = Image
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: str) -> T | None:
        return self.session.get(self.model, id)

    def create(self, **values: Any) -> T:
        instance = self.model(**values)
        self.session.add(instance)
        self.session.flush()
        return instance

    def update(self, id: str, **values: Any) -> T | None:
        """Set the given columns on one row. Unknown names are ignored."""
        instance = self.get_by_id(id)
        if instance is None:
            return None
        columns = self.model.__table__.columns.keys()
        for key, value in values.items():
            if key in columns:
                setattr(instance, key, value)
        self.session.flush()
        return instance

    def bulk_update(self, ids: list[str], **values: Any) -> int:
        """Apply the same values to every row in ids; returns rows matched."""
        if not ids:
            return 0
        result = self.session.execute(
            update(self.model)
            .where(self.model.id.in_(ids))  # type: ignore[attr-defined]
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self.session.flush()
        return result.rowcount

    def delete(self, id: str) -> bool:
        instance = self.get_by_id(id)
        if instance is None:
            return False
        self.session.delete(instance)
        self.session.flush()
        return True

    def count(self, **equals: Any) -> int:
        """Count rows whose columns equal the given values."""
        stmt = select(func.count()).select_from(self.model).filter_by(**equals)
        return self.session.scalar(stmt) or 0
