"""
Catalog item repositories with typed list filters and text search.
"""

from dataclasses import asdict, dataclass
from typing import Any, Optional

from sqlalchemy import asc, desc, func, or_

from catalog.constants import DEFAULT_PAGE_SIZE, ItemType
from catalog.models import Accessory, Pipe, Tobacco

from .base import BaseRepository


@dataclass(frozen=True)
class ItemFilters:
    """Public list query shared by every item type."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    brand: Optional[str] = None
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def as_params(self) -> dict[str, Any]:
        """Parameters used to build the list cache key."""
        return asdict(self)

    def column_filters(self) -> dict[str, str]:
        """Exact-match column filters that are set."""
        return {"brand": self.brand} if self.brand else {}


@dataclass(frozen=True)
class PipeFilters(ItemFilters):
    country: Optional[str] = None

    def column_filters(self) -> dict[str, str]:
        filters = super().column_filters()
        if self.country:
            filters["country"] = self.country
        return filters


@dataclass(frozen=True)
class TobaccoFilters(ItemFilters):
    blend_type: Optional[str] = None

    def column_filters(self) -> dict[str, str]:
        filters = super().column_filters()
        if self.blend_type:
            filters["blend_type"] = self.blend_type
        return filters


@dataclass(frozen=True)
class AccessoryFilters(ItemFilters):
    category: Optional[str] = None

    def column_filters(self) -> dict[str, str]:
        filters = super().column_filters()
        if self.category:
            filters["category"] = self.category
        return filters


class ItemRepository(BaseRepository):
    """
    Shared queries for pipes, tobaccos and accessories.

    Subclasses declare which columns feed the public list search, the global
    search, the admin search and the filter option lists.
    """

    item_type: ItemType
    list_search_fields: tuple[str, ...] = ("name", "brand")
    search_fields: tuple[str, ...] = ("name", "brand")
    admin_search_fields: tuple[str, ...] = ("name", "brand")
    option_fields: dict[str, str] = {}
    admin_sort_fields: tuple[str, ...] = ("name", "brand", "created_at", "updated_at")

    def _ilike_any(self, fields: tuple[str, ...], term: str):
        """Case-insensitive substring match; % and _ in the term match literally."""
        needle = term.lower()
        return or_(*(func.lower(getattr(self.model, f)).contains(needle, autoescape=True) for f in fields))

    def get_active(self, item_id: str):
        """Get an item only if it is visible to the public."""
        return (
            self.session.query(self.model)
            .filter(self.model.id == item_id, self.model.is_active.is_(True))
            .first()
        )

    def list_active(self, filters: ItemFilters) -> tuple[list, int]:
        """
        Page of active items ordered by name.

        Returns:
            Tuple of (items, total_count)
        """
        conditions = [self.model.is_active.is_(True)]
        for column, value in filters.column_filters().items():
            conditions.append(getattr(self.model, column) == value)
        if filters.search:
            conditions.append(self._ilike_any(self.list_search_fields, filters.search))

        total = self.session.query(func.count(self.model.id)).filter(*conditions).scalar() or 0
        items = (
            self.session.query(self.model)
            .filter(*conditions)
            .order_by(self.model.name.asc())
            .offset(filters.offset)
            .limit(filters.limit)
            .all()
        )
        return items, total

    def filter_options(self) -> dict[str, list[str]]:
        """Distinct non-empty values of each filterable column among active items."""
        options = {}
        for key, column_name in self.option_fields.items():
            column = getattr(self.model, column_name)
            rows = (
                self.session.query(column)
                .filter(self.model.is_active.is_(True), column.isnot(None))
                .distinct()
                .order_by(column.asc())
                .all()
            )
            options[key] = [row[0] for row in rows if row[0]]
        return options

    def search(self, term: str, offset: int, limit: int) -> tuple[list, int]:
        """Case-insensitive substring search over active items."""
        conditions = [self.model.is_active.is_(True), self._ilike_any(self.search_fields, term)]
        total = self.session.query(func.count(self.model.id)).filter(*conditions).scalar() or 0
        items = (
            self.session.query(self.model)
            .filter(*conditions)
            .order_by(self.model.name.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def list_admin(
        self,
        offset: int,
        limit: int,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list, int]:
        """Page of all items, active or not, for the back office."""
        query = self.session.query(self.model)
        if search:
            query = query.filter(self._ilike_any(self.admin_search_fields, search))

        total = query.count()

        column = getattr(self.model, sort_by if sort_by in self.admin_sort_fields else "created_at")
        direction = asc if sort_order == "asc" else desc
        items = query.order_by(direction(column)).offset(offset).limit(limit).all()
        return items, total

    def count_active(self) -> int:
        return self.count(is_active=True)


class PipeRepository(ItemRepository):
    model = Pipe
    item_type = ItemType.PIPE
    search_fields = ("name", "brand", "country", "material", "shape")
    admin_search_fields = ("name", "brand", "model")
    option_fields = {"brands": "brand", "countries": "country"}


class TobaccoRepository(ItemRepository):
    model = Tobacco
    item_type = ItemType.TOBACCO
    search_fields = ("name", "brand", "blend_type", "contents")
    admin_search_fields = ("name", "brand", "blend_type")
    option_fields = {"brands": "brand", "blend_types": "blend_type"}


class AccessoryRepository(ItemRepository):
    model = Accessory
    item_type = ItemType.ACCESSORY
    list_search_fields = ("name", "brand", "description")
    search_fields = ("name", "brand", "category", "description")
    admin_search_fields = ("name", "brand", "category", "description")
    option_fields = {"brands": "brand", "categories": "category"}


ITEM_REPOSITORIES: dict[ItemType, type[ItemRepository]] = {
    ItemType.PIPE: PipeRepository,
    ItemType.TOBACCO: TobaccoRepository,
    ItemType.ACCESSORY: AccessoryRepository,
}


def item_repository(session, item_type: ItemType) -> ItemRepository:
    """Build the repository for an item type."""
    return ITEM_REPOSITORIES[item_type](session)
