"""
Rating repository with per-item aggregates and per-session upsert.
"""

from sqlalchemy import func

from catalog.models import Rating

from .base import BaseRepository


class RatingRepository(BaseRepository[Rating]):
    """Repository for star ratings."""

    model = Rating

    def get_for_session(self, item_type: str, item_id: str, session_id: str) -> Rating | None:
        return (
            self.session.query(Rating)
            .filter(
                Rating.item_type == item_type,
                Rating.item_id == item_id,
                Rating.session_id == session_id,
            )
            .first()
        )

    def upsert(
        self,
        item_type: str,
        item_id: str,
        session_id: str,
        rating: int,
        ip_address: str | None = None,
    ) -> Rating:
        """Create the session's rating of an item, or replace its value."""
        existing = self.get_for_session(item_type, item_id, session_id)
        if existing:
            existing.rating = rating
            existing.ip_address = ip_address
            self.session.flush()
            return existing
        return self.create(
            item_type=item_type,
            item_id=item_id,
            session_id=session_id,
            rating=rating,
            ip_address=ip_address,
        )

    def aggregates(self, item_type: str, item_ids: list[str]) -> dict[str, tuple[float, int]]:
        """
        (raw average, count) per item, computed in one grouped query.

        Items without ratings are absent from the result.
        """
        if not item_ids:
            return {}
        rows = (
            self.session.query(Rating.item_id, func.avg(Rating.rating), func.count(Rating.id))
            .filter(Rating.item_type == item_type, Rating.item_id.in_(item_ids))
            .group_by(Rating.item_id)
            .all()
        )
        return {item_id: (float(avg or 0), int(count)) for item_id, avg, count in rows}

    def delete_for_item(self, item_type: str, item_id: str) -> int:
        deleted = (
            self.session.query(Rating)
            .filter(Rating.item_type == item_type, Rating.item_id == item_id)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted
