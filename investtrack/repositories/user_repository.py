from sqlalchemy.orm import Session
from investtrack.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> User | None:
        """Get user by internal ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        """
        Get user by email.

        Emails are stored lower-cased, so the lookup value is lower-cased too.
        """
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user
