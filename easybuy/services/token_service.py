# easybuy/services/token_service.py
import uuid
from datetime import datetime, timezone, timedelta

import jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from easybuy.data.models import UserModel
from easybuy.domain.errors import AuthError, AuthErrorKind
from easybuy.domain.schemas import TokenPairOut
from easybuy.repos.user_repo import UserRepo
from easybuy.services.lock_service import LockService
from easybuy.utils.settings import (
    ACCESS_TOKEN_SECRET,
    REFRESH_TOKEN_SECRET,
    ACCESS_TOKEN_TTL_SECONDS,
)
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"


class AuthResult(BaseModel):
    """
    Wynik weryfikacji access tokena: ok + user_id albo error.
    Zwracany zamiast rzucania, caller decyduje co dalej.
    """

    model_config = {"frozen": True}

    ok: bool
    user_id: int | None = None
    error: AuthErrorKind | None = None

    @classmethod
    def success(cls, user_id: int) -> "AuthResult":
        return cls(ok=True, user_id=user_id)

    @classmethod
    def failure(cls, kind: AuthErrorKind) -> "AuthResult":
        return cls(ok=False, error=kind)

    def unwrap(self) -> int:
        if not self.ok:
            raise AuthError(self.error)
        return self.user_id


class TokenService:
    """
    Access token: podpisany, 15 min, bez stanu po stronie serwera.
    Refresh token: podpisany, bez exp - wazny tylko gdy jest w zbiorze
    refresh tokenow uzytkownika (allowlista, rotacja i revoke).
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        access_secret: str = ACCESS_TOKEN_SECRET,
        refresh_secret: str = REFRESH_TOKEN_SECRET,
        access_ttl: int = ACCESS_TOKEN_TTL_SECONDS,
    ):
        self.repo = UserRepo(db)
        self.lock_service = lock_service
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl

    # =====================================================
    # ISSUE / VERIFY
    # =====================================================
    def issue_access_token(self, user_id: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "iat": now,
            "exp": now + timedelta(seconds=self.access_ttl),
        }
        return jwt.encode(payload, self.access_secret, algorithm=ALGORITHM)

    def issue_refresh_token(self, user_id: int) -> str:
        #jti zeby dwa tokeny z tej samej sekundy sie roznily
        payload = {
            "id": user_id,
            "iat": datetime.now(timezone.utc),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=ALGORITHM)

    def verify_access(self, token: str | None) -> AuthResult:
        if not token:
            return AuthResult.failure(AuthErrorKind.MISSING)
        try:
            payload = jwt.decode(token, self.access_secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            return AuthResult.failure(AuthErrorKind.EXPIRED)
        except jwt.InvalidTokenError:
            return AuthResult.failure(AuthErrorKind.INVALID)

        user_id = payload.get("id")
        if not isinstance(user_id, int):
            return AuthResult.failure(AuthErrorKind.INVALID)
        return AuthResult.success(user_id)

    def _refresh_subject(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.refresh_secret, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError:
            raise AuthError(AuthErrorKind.INVALID, "Invalid refresh token")

        user_id = payload.get("id")
        if not isinstance(user_id, int):
            raise AuthError(AuthErrorKind.INVALID, "Invalid refresh token")
        return user_id

    # =====================================================
    # SESSION LIFECYCLE
    # =====================================================
    def open_session(self, user: UserModel) -> TokenPairOut:
        """Login: nowa para tokenow, refresh dopisany do allowlisty."""
        with self.lock_service.hold(user.id):
            self.repo.refresh(user)
            access_token = self.issue_access_token(user.id)
            refresh_token = self.issue_refresh_token(user.id)
            user.add_refresh_token(refresh_token)
            self.repo.save(user)

        logger.info(f"Session opened for user {user.id}")
        return TokenPairOut(access_token=access_token, refresh_token=refresh_token)

    def rotate(self, old_token: str | None) -> TokenPairOut:
        """
        Wymiana refresh tokena na nowa pare.
        Stary usuwany i nowy dodawany w jednym save, pod lockiem usera.
        """
        if not old_token:
            raise AuthError(AuthErrorKind.MISSING, "Refresh token required")

        user_id = self._refresh_subject(old_token)

        with self.lock_service.hold(user_id):
            user = self.repo.get_by_refresh_token(old_token)
            if user is None or user.id != user_id:
                logger.warning(f"Refresh token rejected for user {user_id}: not in allowlist")
                raise AuthError(AuthErrorKind.INVALID, "Invalid refresh token")

            access_token = self.issue_access_token(user.id)
            new_refresh_token = self.issue_refresh_token(user.id)

            user.discard_refresh_token(old_token)
            user.add_refresh_token(new_refresh_token)
            self.repo.save(user)

        logger.info(f"Refresh token rotated for user {user_id}")
        return TokenPairOut(access_token=access_token, refresh_token=new_refresh_token)

    def revoke(self, token: str) -> None:
        """Logout. Nieznany token to blad, token juz usuniety pod lockiem to no-op."""
        user = self.repo.get_by_refresh_token(token)
        if user is None:
            raise AuthError(AuthErrorKind.UNKNOWN, "Unknown refresh token")

        with self.lock_service.hold(user.id):
            self.repo.refresh(user)
            if user.discard_refresh_token(token):
                self.repo.save(user)
            else:
                logger.info(f"Refresh token for user {user.id} already revoked")

        logger.info(f"User {user.id} logged out")
