import logging
import uuid
from typing import Dict, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from musicos.adapters.identity import RESET, CurrentUser, TokenIdentityProvider
from musicos.adapters.mailer import MailerError
from musicos.config import settings as default_settings
from musicos.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionDenied,
    RateLimited,
    ValidationError,
)
from musicos.models.user import User
from musicos.repositories.user_repo import UserRepository
from musicos.services import email_templates
from musicos.utils.clock import utcnow
from musicos.utils.sanitize import sanitize
from musicos.utils.transactions import atomic
from musicos.utils.validators import (
    normalize_phone,
    validate_email,
    validate_name,
    validate_nif,
    validate_password,
    validate_phone,
)

log = logging.getLogger("accounts")

USER_TYPES = ("musico", "empresa")
BAD_CREDENTIALS = "Email ou password incorretos"
RESET_MESSAGE = "Se o email existir, receberá um código de recuperação"


def _check(result):
    if not result.valid:
        raise ValidationError(result.error)


def public_user(user: User) -> Dict:
    return {
        "uid": user.uid,
        "email": user.email,
        "nome": user.nome,
        "tipo": user.tipo,
        "telefone": user.telefone,
        "active": user.active,
        "emailVerified": user.email_verified,
        "loginCount": user.login_count,
        "lastLogin": user.last_login,
        "createdAt": user.created_at,
    }


class AccountService:
    """Registration, login, password reset and profile for musicians and companies."""

    def __init__(
        self,
        db: Session,
        mailer=None,
        rate_limiter=None,
        settings=default_settings,
        clock=utcnow,
    ):
        self.db = db
        self.users = UserRepository(db)
        self.identity = TokenIdentityProvider(db, ttl_hours=settings.TOKEN_TTL_HOURS, clock=clock)
        self.mailer = mailer
        self.rate_limiter = rate_limiter
        self.settings = settings
        self.clock = clock

    def _send(self, to: str, subject: str, html: str):
        if self.mailer is None:
            return
        try:
            self.mailer.send(to, subject, html)
        except MailerError:
            log.exception("account email to %s failed", to)

    def register(self, data: Mapping) -> Dict:
        email = (data.get("email") or "").strip().lower()
        password = data.get("password")
        nome = sanitize(data.get("nome") or "")
        tipo = data.get("tipo")
        if not email or not password or not nome or not tipo:
            raise ValidationError("Email, password, nome e tipo são obrigatórios")
        if tipo not in USER_TYPES:
            raise ValidationError("Tipo de utilizador inválido (musico ou empresa)")
        _check(validate_email(email))
        _check(validate_password(password))
        _check(validate_name(nome))

        telefone = (data.get("telefone") or "").strip()
        if telefone:
            _check(validate_phone(telefone))
            telefone = normalize_phone(telefone)
        nif = str(data.get("nif") or "").replace(" ", "") or None
        if nif:
            _check(validate_nif(nif))

        if self.users.get_by_email(email):
            raise ConflictError("Este email já está registado")
        if nif and self.users.get_by_nif(nif):
            raise ConflictError("Este NIF já está registado")

        user = User(
            uid=uuid.uuid4().hex,
            email=email,
            nome=nome,
            tipo=tipo,
            telefone=telefone,
            nif=nif,
            password_hash=generate_password_hash(password),
            created_at=self.clock(),
        )
        try:
            with atomic(self.db, "Erro ao registar utilizador"):
                self.users.add(user)
        except IntegrityError as exc:
            # lost a race against a concurrent registration
            raise ConflictError("Este email ou NIF já está registado") from exc

        log.info("user registered %s (%s)", user.uid, tipo)
        self._send(email, *email_templates.registration(nome, tipo))
        return {
            "success": True,
            "uid": user.uid,
            "message": "Utilizador registado com sucesso. Verifique o seu email.",
        }

    def login(self, email: Optional[str], password: Optional[str], identifier: str) -> Dict:
        if not email or not password:
            raise ValidationError("Email e password são obrigatórios")
        if self.rate_limiter is not None and not self.rate_limiter.check(f"login:{identifier}"):
            raise RateLimited()

        user = self.users.get_by_email(email)
        if not user or not user.active or not check_password_hash(user.password_hash, password):
            log.info("failed login for %s", identifier)
            raise AuthError(BAD_CREDENTIALS)

        with atomic(self.db, "Erro ao validar login"):
            user.login_count = (user.login_count or 0) + 1
            user.last_login = self.clock()
            token = self.identity.issue_token(user.uid)
        log.info("user %s logged in", user.uid)
        return {
            "success": True,
            "token": token,
            "user": {"uid": user.uid, "email": user.email, "nome": user.nome, "tipo": user.tipo},
        }

    def request_password_reset(self, email: Optional[str]) -> Dict:
        """Same answer whether or not the account exists."""
        if not email:
            raise ValidationError("Email é obrigatório")
        user = self.users.get_by_email(email)
        if user and user.active:
            with atomic(self.db, "Erro ao processar reset de password"):
                token = self.identity.issue_token(user.uid, purpose=RESET)
            self._send(user.email, *email_templates.password_reset(user.nome, token))
            log.info("password reset requested for %s", user.uid)
        return {"success": True, "message": RESET_MESSAGE}

    def reset_password(self, token: Optional[str], new_password: Optional[str]) -> Dict:
        _check(validate_password(new_password))
        with atomic(self.db, "Erro ao processar reset de password"):
            uid = self.identity.consume_reset_token(token)
            user = self.users.get(uid)
            if not user:
                raise AuthError("Código de recuperação inválido ou expirado")
            user.password_hash = generate_password_hash(new_password)
            user.updated_at = self.clock()
        log.info("password reset completed for %s", uid)
        return {"success": True, "message": "Password alterada com sucesso"}

    def update_profile(self, current: CurrentUser, data: Mapping) -> Dict:
        if data.get("uid") and data.get("uid") != current.uid:
            raise PermissionDenied("Sem permissão para atualizar outro utilizador")
        user = self.users.get(current.uid)
        if not user:
            raise NotFoundError("Utilizador não encontrado")

        nome = sanitize(data.get("nome") or "")
        telefone = (data.get("telefone") or "").strip()
        if nome:
            _check(validate_name(nome))
        if telefone:
            _check(validate_phone(telefone))

        with atomic(self.db, "Erro ao atualizar perfil"):
            if nome:
                user.nome = nome
            if telefone:
                user.telefone = normalize_phone(telefone)
            user.updated_at = self.clock()
        log.info("profile updated %s", user.uid)
        return {"success": True, "user": public_user(user)}

    def get_status(self, current: CurrentUser) -> Dict:
        user = self.users.get(current.uid)
        if not user:
            raise NotFoundError("Utilizador não encontrado")
        return {"success": True, "user": public_user(user)}
