# easybuy/api/deps.py
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from easybuy.data.database import get_db
from easybuy.services.account_service import AccountService
from easybuy.services.cart_service import CartService
from easybuy.services.catalog import CatalogGateway
from easybuy.services.credentials import CredentialStore
from easybuy.services.order_service import OrderService
from easybuy.services.review_service import ReviewService
from easybuy.services.token_service import TokenService

_bearer = HTTPBearer(auto_error=False)


#singletony procesu trzymane w app.state (create_app)
def get_catalog(request: Request) -> CatalogGateway:
    return request.app.state.catalog


def get_lock_service(request: Request):
    return request.app.state.lock_service


def get_credentials(request: Request) -> CredentialStore:
    return request.app.state.credentials


def get_token_service(
    db: Session = Depends(get_db),
    lock_service=Depends(get_lock_service),
) -> TokenService:
    return TokenService(db=db, lock_service=lock_service)


def get_current_user_id(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    token = creds.credentials if creds else None
    return tokens.verify_access(token).unwrap()


def get_account_service(
    db: Session = Depends(get_db),
    credentials: CredentialStore = Depends(get_credentials),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(db=db, credentials=credentials, tokens=tokens)


def get_cart_service(
    db: Session = Depends(get_db),
    catalog: CatalogGateway = Depends(get_catalog),
    lock_service=Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, catalog=catalog, lock_service=lock_service)


def get_order_service(
    db: Session = Depends(get_db),
    catalog: CatalogGateway = Depends(get_catalog),
    lock_service=Depends(get_lock_service),
) -> OrderService:
    return OrderService(db=db, catalog=catalog, lock_service=lock_service)


def get_review_service(
    db: Session = Depends(get_db),
    lock_service=Depends(get_lock_service),
) -> ReviewService:
    return ReviewService(db=db, lock_service=lock_service)


def image_url_builder(request: Request):
    """URL obrazka recenzji: /order/{order_id}/review/image/{index}."""
    def image_url_for(order_id: str, index: int) -> str:
        return str(request.url_for("get_review_image", order_id=order_id, index=index))
    return image_url_for
