"""
Image repository: gallery ordering and featured image lookups.
"""

from sqlalchemy import func

from catalog.models import Image

from .base import BaseRepository


class ImageRepository(BaseRepository[Image]):
    """Repository for item images."""

    model = Image

    def for_item(self, item_type: str, item_id: str) -> list[Image]:
        """Images of an item, featured first, then by sort order."""
        return (
            self.session.query(Image)
            .filter(Image.item_type == item_type, Image.item_id == item_id)
            .order_by(Image.is_featured.desc(), Image.sort_order.asc())
            .all()
        )

    def featured_for_items(self, item_type: str, item_ids: list[str]) -> dict[str, Image]:
        """
        Featured image per item in a single query.

        Items without a featured image are absent from the result.
        """
        if not item_ids:
            return {}
        rows = (
            self.session.query(Image)
            .filter(
                Image.item_type == item_type,
                Image.item_id.in_(item_ids),
                Image.is_featured.is_(True),
            )
            .order_by(Image.sort_order.asc())
            .all()
        )
        featured: dict[str, Image] = {}
        for image in rows:
            featured.setdefault(image.item_id, image)
        return featured

    def first_for_items(self, item_type: str, item_ids: list[str]) -> dict[str, Image]:
        """Lowest sort-order image per item, for admin listings."""
        if not item_ids:
            return {}
        rows = (
            self.session.query(Image)
            .filter(Image.item_type == item_type, Image.item_id.in_(item_ids))
            .order_by(Image.sort_order.asc())
            .all()
        )
        first: dict[str, Image] = {}
        for image in rows:
            first.setdefault(image.item_id, image)
        return first

    def max_sort_order(self, item_type: str, item_id: str) -> int:
        """Highest sort order used by an item's images, 0 when it has none."""
        result = (
            self.session.query(func.max(Image.sort_order))
            .filter(Image.item_type == item_type, Image.item_id == item_id)
            .scalar()
        )
        return result or 0

    def renumber(self, item_type: str, item_id: str) -> None:
        """Rewrite sort orders of an item's images as 1..n, keeping their order."""
        images = (
            self.session.query(Image)
            .filter(Image.item_type == item_type, Image.item_id == item_id)
            .order_by(Image.sort_order.asc(), Image.created_at.asc())
            .all()
        )
        for position, image in enumerate(images, start=1):
            image.sort_order = position
        self.session.flush()

    def delete_for_item(self, item_type: str, item_id: str) -> list[str]:
        """
        Delete every image row of an item.

        Returns:
            Filenames of the deleted rows, so callers can remove the files.
        """
        images = (
            self.session.query(Image)
            .filter(Image.item_type == item_type, Image.item_id == item_id)
            .all()
        )
        filenames = [image.filename for image in images]
        for image in images:
            self.session.delete(image)
        self.session.flush()
        return filenames
