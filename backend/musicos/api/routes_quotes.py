from typing import Optional

from fastapi import APIRouter, Depends, Header

from musicos.api.deps import get_csrf_store, get_mailer
from musicos.config import settings
from musicos.errors import PermissionDenied
from musicos.schemas.quote_schema import QuoteRequestIn
from musicos.services.quote_service import QuoteService
from musicos.services.security import CsrfTokenStore

router = APIRouter(prefix="/api", tags=["quotes"])


@router.get("/security/csrf-token", summary="Issue a single-use CSRF token")
def csrf_token(store: CsrfTokenStore = Depends(get_csrf_store)):
    return {"csrfToken": store.issue(), "expiresIn": settings.CSRF_TTL_SECONDS}


@router.post("/enviar-orcamento", summary="Send a quote request by email")
def send_quote(
    payload: QuoteRequestIn,
    x_csrf_token: Optional[str] = Header(None),
    store: CsrfTokenStore = Depends(get_csrf_store),
    mailer=Depends(get_mailer),
):
    if settings.CSRF_PROTECTION and not store.validate(x_csrf_token):
        raise PermissionDenied("Token CSRF inválido ou expirado")
    return QuoteService(mailer).send_quote_request(payload.model_dump())
