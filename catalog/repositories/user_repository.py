"""User repository."""

from catalog.models import User

from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for admin users."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email.strip().lower()).first()

    def create_user(self, email: str, password_hash: str, name: str | None = None) -> User:
        return self.create(email=email.strip().lower(), password_hash=password_hash, name=name)
