# easybuy/data/models/user.py
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from easybuy.data.database import Base


class UserModel(Base):
    """
    Aggregate uzytkownika: refresh tokeny, koszyk i zamowienia
    zapisywane razem (UserRepo.save).
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)

    # optimistic locking, podbijane przy kazdym save
    version = Column(Integer, nullable=False, default=1)

    refresh_tokens = relationship(
        "RefreshTokenModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    cart = relationship(
        "CartModel",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    orders = relationship(
        "OrderModel",
        back_populates="user",
        order_by="OrderModel.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    def has_refresh_token(self, token: str) -> bool:
        return any(t.token == token for t in self.refresh_tokens)

    def add_refresh_token(self, token: str) -> None:
        self.refresh_tokens.append(RefreshTokenModel(token=token))

    def discard_refresh_token(self, token: str) -> bool:
        for t in list(self.refresh_tokens):
            if t.token == token:
                self.refresh_tokens.remove(t)
                return True
        return False

    def find_order(self, order_id: str):
        return next((o for o in self.orders if o.id == order_id), None)


class RefreshTokenModel(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(512), nullable=False, unique=True, index=True)

    user = relationship("UserModel", back_populates="refresh_tokens")
