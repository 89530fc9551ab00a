import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from musicos.errors import AuthError
from musicos.repositories.user_repo import UserRepository
from musicos.utils.clock import utcnow

SESSION = "session"
RESET = "reset"
RESET_TTL = timedelta(hours=1)


@dataclass(frozen=True)
class CurrentUser:
    uid: str
    email: str
    nome: str
    tipo: str

    @property
    def is_admin(self) -> bool:
        return self.tipo == "admin"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenIdentityProvider:
    """
    Opaque bearer tokens. Only the sha256 of a token is stored, so a leaked
    table cannot be replayed. Tokens are flushed, not committed: the caller's
    unit of work decides.
    """

    def __init__(self, db: Session, ttl_hours: int = 24, clock=utcnow):
        self.users = UserRepository(db)
        self.ttl = timedelta(hours=ttl_hours)
        self.clock = clock

    def issue_token(self, uid: str, purpose: str = SESSION) -> str:
        token = secrets.token_urlsafe(32)
        ttl = RESET_TTL if purpose == RESET else self.ttl
        self.users.add_token(uid, hash_token(token), self.clock() + ttl, purpose=purpose)
        return token

    def _lookup(self, token: Optional[str], purpose: str):
        record = self.users.get_token(hash_token(token)) if token else None
        if not record or record.purpose != purpose or record.expires_at <= self.clock():
            return None
        return record

    def authenticate(self, token: Optional[str]) -> CurrentUser:
        if not token:
            raise AuthError("Token de autenticação obrigatório")
        record = self._lookup(token, SESSION)
        user = self.users.get(record.uid) if record else None
        if not user or not user.active:
            raise AuthError("Token inválido")
        return CurrentUser(uid=user.uid, email=user.email, nome=user.nome, tipo=user.tipo)

    def consume_reset_token(self, token: Optional[str]) -> str:
        """Returns the uid the reset token was issued for; the token is spent."""
        record = self._lookup(token, RESET)
        if not record:
            raise AuthError("Código de recuperação inválido ou expirado")
        uid = record.uid
        self.users.delete_token(record)
        return uid
