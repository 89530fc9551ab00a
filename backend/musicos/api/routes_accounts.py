from fastapi import APIRouter, Depends, Request

from musicos.adapters.identity import CurrentUser
from musicos.api.deps import get_account_service, get_current_user
from musicos.schemas.account_schema import (
    LoginIn,
    ProfileIn,
    RegisterIn,
    ResetPasswordConfirmIn,
    ResetPasswordIn,
)
from musicos.services.account_service import AccountService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201, summary="Register a musician or company")
def register(payload: RegisterIn, svc: AccountService = Depends(get_account_service)):
    return svc.register(payload.model_dump())


@router.post("/login", summary="Validate credentials and issue a bearer token")
def login(payload: LoginIn, request: Request, svc: AccountService = Depends(get_account_service)):
    client = request.client.host if request.client else "unknown"
    identifier = f"{client}:{(payload.email or '').strip().lower()}"
    return svc.login(payload.email, payload.password, identifier)


@router.post("/reset-password", summary="Request a password reset code")
def reset_password(payload: ResetPasswordIn, svc: AccountService = Depends(get_account_service)):
    return svc.request_password_reset(payload.email)


@router.post("/reset-password/confirm", summary="Set a new password with a reset code")
def reset_password_confirm(
    payload: ResetPasswordConfirmIn, svc: AccountService = Depends(get_account_service)
):
    return svc.reset_password(payload.token, payload.password)


@router.post("/profile", summary="Update own profile")
def update_profile(
    payload: ProfileIn,
    user: CurrentUser = Depends(get_current_user),
    svc: AccountService = Depends(get_account_service),
):
    return svc.update_profile(user, payload.model_dump(exclude_none=True))


@router.get("/status", summary="Current user status")
def get_status(
    user: CurrentUser = Depends(get_current_user),
    svc: AccountService = Depends(get_account_service),
):
    return svc.get_status(user)
