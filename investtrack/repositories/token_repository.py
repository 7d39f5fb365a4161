from sqlalchemy.orm import Session
from investtrack.models.token import Token


class TokenRepository:
    """Repository for password-reset tokens"""

    def __init__(self, db: Session):
        self.db = db

    def get_latest_for_user(self, user_id: int) -> Token | None:
        """Most recently issued token of a user"""
        return (
            self.db.query(Token)
            .filter(Token.user_id == user_id)
            .order_by(Token.created_at.desc(), Token.id.desc())
            .first()
        )

    def delete_for_user(self, user_id: int) -> None:
        """Purge every token issued to a user"""
        self.db.query(Token).filter(Token.user_id == user_id).delete(synchronize_session=False)
        self.db.flush()

    def add(self, token: Token) -> Token:
        self.db.add(token)
        self.db.flush()
        return token
