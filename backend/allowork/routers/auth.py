from fastapi import APIRouter, Depends, HTTPException

from allowork.auth import create_access_token, require_authenticated_user
from allowork.http_errors import raise_http_error
from allowork.models import AuthLoginRequest, AuthLoginResponse, AuthMeResponse, AuthRegisterRequest, User
from allowork.services.marketplace_store import MarketplaceError, MarketplacePermissionError, marketplace_store

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> AuthLoginResponse:
    token, expires_at = create_access_token(user_id=user.id)
    return AuthLoginResponse(access_token=token, user=user, expires_at=expires_at)


@router.post("/register", response_model=AuthLoginResponse)
def register(payload: AuthRegisterRequest):
    try:
        user = marketplace_store.register_user(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
            role=payload.role,
            location=payload.location,
            specialty=payload.specialty,
        )
    except MarketplaceError as exc:
        raise_http_error(exc)
    return _token_response(user)


@router.post("/login", response_model=AuthLoginResponse)
def login(payload: AuthLoginRequest):
    try:
        user = marketplace_store.authenticate(email=payload.email, password=payload.password)
    except MarketplacePermissionError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except MarketplaceError as exc:
        raise_http_error(exc)
    return _token_response(user)


@router.get("/me", response_model=AuthMeResponse)
def me(user: User = Depends(require_authenticated_user)):
    return AuthMeResponse(user=user)
