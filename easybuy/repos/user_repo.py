# easybuy/repos/user_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from easybuy.data.models import UserModel, RefreshTokenModel
from easybuy.domain.errors import ConcurrencyConflict
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)


class UserRepo:
    """
    Load/save calego aggregate uzytkownika.
    Save jest chroniony wersja (optimistic locking), nie ma update per pole.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def get_by_refresh_token(self, token: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel)
            .join(UserModel.refresh_tokens)
            .where(RefreshTokenModel.token == token)
        ).scalar_one_or_none()

    def refresh(self, user: UserModel) -> UserModel:
        #przeladuj stan z bazy, np po zalozeniu locka
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        if user.id is None:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"Created user {user.id}")
            return user

        loaded_version = user.version

        # update set version 2 where id 1 and version 1, przed flushem dzieci
        with self.db.no_autoflush:
            rowcount = self.db.execute(
                update(UserModel)
                .where(UserModel.id == user.id, UserModel.version == loaded_version)
                .values(version=loaded_version + 1)
            ).rowcount

        if rowcount == 0:
            self.rollback()
            logger.warning(
                f"Version conflict for user {user.id} (loaded version {loaded_version})"
            )
            raise ConcurrencyConflict(
                "User was modified by another request, retry the operation"
            )

        self.db.commit()
        return user

    def rollback(self) -> None:
        self.db.rollback()
