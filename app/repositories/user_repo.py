# app/repositories/user_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from app.models.user import User


class UserRepository:
    """
    Read access to accounts.

    Accounts are provisioned outside this service, so there are no writes
    here. Soft-deleted accounts are invisible: every lookup filters them out.
    """

    def get_by_id(self, session: Session, user_id: int) -> User | None:
        """Live account by primary key, or None (missing or soft-deleted)."""
        user = session.get(User, user_id)
        if user is None or user.is_deleted:
            return None
        return user

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Live account by email, compared case-insensitively."""
        stmt = select(User).where(
            func.lower(User.email) == email.strip().lower(),
            User.is_deleted == False,
        )
        return session.exec(stmt).first()
