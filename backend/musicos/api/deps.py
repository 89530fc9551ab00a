"""
Request-scoped collaborators.

Shared state (rate limiter, CSRF store) lives on app.state and is reached
through the request, never through module globals. Tests swap collaborators
with app.dependency_overrides.
"""
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from musicos.adapters.blob_store import LocalBlobStore
from musicos.adapters.identity import CurrentUser, TokenIdentityProvider
from musicos.adapters.mailer import SmtpMailer
from musicos.config import settings
from musicos.db import get_db
from musicos.errors import PermissionDenied
from musicos.services.account_service import AccountService
from musicos.services.cart_service import CartService
from musicos.services.checkout_service import CheckoutService
from musicos.services.security import CsrfTokenStore, RateLimiter


def get_mailer():
    return SmtpMailer.from_settings(settings)


def get_blob_store():
    return LocalBlobStore(settings.UPLOAD_DIR, settings.PUBLIC_UPLOAD_URL)


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_csrf_store(request: Request) -> CsrfTokenStore:
    return request.app.state.csrf_store


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_current_user(
    token: Optional[str] = Depends(bearer_token), db: Session = Depends(get_db)
) -> CurrentUser:
    return TokenIdentityProvider(db, ttl_hours=settings.TOKEN_TTL_HOURS).authenticate(token)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise PermissionDenied("Apenas administradores")
    return user


def get_checkout_service(
    db: Session = Depends(get_db),
    blob_store=Depends(get_blob_store),
    mailer=Depends(get_mailer),
) -> CheckoutService:
    return CheckoutService(db, blob_store=blob_store, mailer=mailer)


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


def get_account_service(
    db: Session = Depends(get_db),
    mailer=Depends(get_mailer),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> AccountService:
    return AccountService(db, mailer=mailer, rate_limiter=rate_limiter)
