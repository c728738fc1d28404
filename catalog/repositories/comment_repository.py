"""
Comment repository for public threads and moderation queues.
"""

from sqlalchemy import func

from catalog.models import Comment

from .base import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    """Repository for visitor comments."""

    model = Comment

    def approved_for_item(
        self, item_type: str, item_id: str, offset: int, limit: int
    ) -> tuple[list[Comment], int]:
        """Approved comments of an item, newest first."""
        conditions = (
            Comment.item_type == item_type,
            Comment.item_id == item_id,
            Comment.is_approved.is_(True),
        )
        total = self.session.query(func.count(Comment.id)).filter(*conditions).scalar() or 0
        comments = (
            self.session.query(Comment)
            .filter(*conditions)
            .order_by(Comment.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return comments, total

    def list_by_status(self, status: str, offset: int, limit: int) -> tuple[list[Comment], int]:
        """Comments for the moderation queue. status is pending, approved or all."""
        query = self.session.query(Comment)
        if status == "pending":
            query = query.filter(Comment.is_approved.is_(False))
        elif status == "approved":
            query = query.filter(Comment.is_approved.is_(True))

        total = query.count()
        comments = query.order_by(Comment.created_at.desc()).offset(offset).limit(limit).all()
        return comments, total

    def status_counts(self) -> dict[str, int]:
        pending = self.count(is_approved=False)
        approved = self.count(is_approved=True)
        return {"pending": pending, "approved": approved, "total": pending + approved}

    def delete_for_item(self, item_type: str, item_id: str) -> int:
        deleted = (
            self.session.query(Comment)
            .filter(Comment.item_type == item_type, Comment.item_id == item_id)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted
