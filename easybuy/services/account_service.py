# easybuy/services/account_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from easybuy.data.models import UserModel, CartModel
from easybuy.domain.errors import AuthError, AuthErrorKind, ConflictError, NotFoundError
from easybuy.domain.schemas import ProfileOut, TokenPairOut
from easybuy.domain.views import ImageUrlFor, line_items, order_view
from easybuy.repos.user_repo import UserRepo
from easybuy.services.credentials import CredentialStore
from easybuy.services.token_service import TokenService
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)


class AccountService:
    def __init__(self, db: Session, credentials: CredentialStore, tokens: TokenService):
        self.repo = UserRepo(db)
        self.credentials = credentials
        self.tokens = tokens

    def register(self, email: str, password: str) -> UserModel:
        if self.repo.get_by_email(email):
            raise ConflictError("Email already registered")

        #koszyk tworzony razem z userem, zawsze pusty
        user = UserModel(
            email=email,
            password_hash=self.credentials.hash(password),
            cart=CartModel(items=[]),
        )
        try:
            return self.repo.save(user)
        except IntegrityError:
            # dwie rejestracje tego samego maila naraz
            self.repo.rollback()
            raise ConflictError("Email already registered")

    def login(self, email: str, password: str) -> TokenPairOut:
        user = self.repo.get_by_email(email)
        if not user or not self.credentials.verify(password, user.password_hash):
            logger.info(f"Failed login for {email}")
            raise AuthError(AuthErrorKind.INVALID, "Invalid credentials")
        return self.tokens.open_session(user)

    def profile(self, user_id: int, image_url_for: ImageUrlFor) -> ProfileOut:
        """Dane /me: zamowienia (obrazki recenzji jako URL) + koszyk."""
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        return ProfileOut(
            id=user.id,
            email=user.email,
            orders=[order_view(o, image_url_for) for o in user.orders],
            cart=line_items(user.cart.items),
        )
