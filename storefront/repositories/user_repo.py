# storefront/repositories/user_repo.py
import uuid

from sqlmodel import Session

from storefront.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Only what identity resolution needs: lookup and first-time insert.
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
