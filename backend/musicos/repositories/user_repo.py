from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from musicos.models.user import AuthToken, User


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, uid: str) -> Optional[User]:
        return self.db.query(User).filter(User.uid == uid).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def get_by_nif(self, nif: str) -> Optional[User]:
        return self.db.query(User).filter(User.nif == nif).first()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def add_token(self, uid: str, token_hash: str, expires_at: datetime, purpose: str = "session") -> AuthToken:
        tok = AuthToken(uid=uid, token_hash=token_hash, expires_at=expires_at, purpose=purpose)
        self.db.add(tok)
        self.db.flush()
        return tok

    def get_token(self, token_hash: str) -> Optional[AuthToken]:
        return self.db.query(AuthToken).filter(AuthToken.token_hash == token_hash).first()

    def delete_token(self, token: AuthToken):
        self.db.delete(token)
        self.db.flush()
