# easybuy/services/cart_service.py
from typing import Iterable

from sqlalchemy.orm import Session

from easybuy.data.models import UserModel, CartModel, CartItemModel
from easybuy.domain.errors import (
    InvalidProduct,
    InvalidQuantity,
    NotFoundError,
    ValidationError,
)
from easybuy.domain.schemas import ItemIn, ProductRecord
from easybuy.repos.user_repo import UserRepo
from easybuy.services.catalog import CatalogGateway
from easybuy.services.lock_service import LockService
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_items(catalog: CatalogGateway, items: Iterable[ItemIn]) -> list[tuple[ItemIn, ProductRecord]]:
    """
    Rozwiazuje wszystkie pozycje w katalogu przed jakakolwiek mutacja.
    Pierwszy nieznany produkt przerywa caly batch.
    """
    resolved = []
    for item in items:
        if item.quantity < 1:
            raise InvalidQuantity(item.quantity)
        info = catalog.lookup_product(item.product_id)
        if info is None:
            logger.info(f"Product {item.product_id} not found in catalog")
            raise InvalidProduct(item.product_id)
        resolved.append((item, info))
    return resolved


class CartService:
    """
    Koszyk jest czescia aggregate uzytkownika:
    lock usera -> load -> mutacja -> save calosci.
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogGateway,
        lock_service: LockService,
    ):
        self.repo = UserRepo(db)
        self.catalog = catalog
        self.lock_service = lock_service

    def _load(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    #query
    def get_cart(self, user_id: int) -> CartModel:
        return self._load(user_id).cart

    #commands
    def add_or_merge(self, user_id: int, items: list[ItemIn]) -> CartModel:
        if not items:
            raise ValidationError("Products required")

        with self.lock_service.hold(user_id):
            user = self._load(user_id)
            resolved = resolve_items(self.catalog, items)

            cart = user.cart
            for item, info in resolved:
                existing = cart.find_item(item.product_id)
                if existing:
                    logger.info(
                        f"Product {item.product_id} already in cart of user {user_id}, "
                        f"quantity {existing.quantity} -> {existing.quantity + item.quantity}"
                    )
                    existing.quantity += item.quantity
                else:
                    cart.items.append(
                        CartItemModel(
                            product_id=item.product_id,
                            name=info.name,
                            image_url=info.image_url,
                            price=info.price,
                            quantity=item.quantity,
                        )
                    )

            self.repo.save(user)

        logger.info(f"Added {len(items)} line(s) to cart of user {user_id}")
        return cart

    def remove(self, user_id: int, product_ids: Iterable[str]) -> int:
        product_ids = set(product_ids)

        with self.lock_service.hold(user_id):
            user = self._load(user_id)
            cart = user.cart

            doomed = [i for i in cart.items if i.product_id in product_ids]
            if not doomed:
                raise NotFoundError("No matching products found in cart")

            for item in doomed:
                cart.items.remove(item)

            self.repo.save(user)

        logger.info(f"Deleted {len(doomed)} product(s) from cart of user {user_id}")
        return len(doomed)

    def set_quantity(self, user_id: int, product_id: str, quantity: int) -> CartModel:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidQuantity(quantity)

        with self.lock_service.hold(user_id):
            user = self._load(user_id)
            item = user.cart.find_item(product_id)
            if not item:
                raise NotFoundError("Product not in cart")

            item.quantity = quantity
            self.repo.save(user)

        return user.cart
