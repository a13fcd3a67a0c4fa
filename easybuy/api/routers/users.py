# easybuy/api/routers/users.py
from fastapi import APIRouter, Depends, Header, Request

from easybuy.api.deps import (
    get_account_service,
    get_current_user_id,
    get_token_service,
    image_url_builder,
)
from easybuy.domain.schemas import (
    LoginIn,
    LogoutIn,
    MessageOut,
    ProfileOut,
    RegisterIn,
    TokenPairOut,
)
from easybuy.services.account_service import AccountService
from easybuy.services.token_service import TokenService

router = APIRouter(tags=["users"])


@router.post("/register", response_model=MessageOut, status_code=201)
def register(payload: RegisterIn, svc: AccountService = Depends(get_account_service)):
    svc.register(payload.email, payload.password)
    return MessageOut(message="User registered")


@router.post("/login", response_model=TokenPairOut)
def login(payload: LoginIn, svc: AccountService = Depends(get_account_service)):
    return svc.login(payload.email, payload.password)


@router.post("/refresh", response_model=TokenPairOut)
def refresh(
    x_refresh_token: str | None = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
):
    """Rotacja: stary refresh token przestaje dzialac, zwracana nowa para."""
    return tokens.rotate(x_refresh_token)


@router.post("/logout", response_model=MessageOut)
def logout(payload: LogoutIn, tokens: TokenService = Depends(get_token_service)):
    tokens.revoke(payload.token)
    return MessageOut(message="Logged out successfully")


@router.get("/me", response_model=ProfileOut)
def me(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    svc: AccountService = Depends(get_account_service),
):
    return svc.profile(user_id, image_url_builder(request))
