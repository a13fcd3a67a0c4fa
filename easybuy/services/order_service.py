# easybuy/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from easybuy.data.models import UserModel, OrderModel, OrderItemModel
from easybuy.data.models.order import new_order_id
from easybuy.domain.errors import InvalidShipping, NotFoundError, ValidationError
from easybuy.domain.schemas import ItemIn, CouponIn, CouponRecord
from easybuy.repos.user_repo import UserRepo
from easybuy.services.cart_service import resolve_items
from easybuy.services.catalog import CatalogGateway
from easybuy.services.lock_service import LockService
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)


def order_total(items: list[OrderItemModel], shipping_fee: Decimal, discount: Decimal | None) -> Decimal:
    """
    total = suma(cena * ilosc) + dostawa - rabat.
    Rabat nie jest przycinany do zera.
    """
    total = sum((i.price * i.quantity for i in items), Decimal("0.00"))
    total += Decimal(shipping_fee)
    if discount:
        total -= Decimal(discount)
    return total


class OrderService:
    """
    Zamowienia: snapshot cen z katalogu w momencie utworzenia/edycji.
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

    def _snapshot(self, items: list[ItemIn]) -> list[OrderItemModel]:
        if not items:
            raise ValidationError("Products required")
        return [
            OrderItemModel(
                product_id=item.product_id,
                name=info.name,
                image_url=info.image_url,
                price=info.price,
                quantity=item.quantity,
            )
            for item, info in resolve_items(self.catalog, items)
        ]

    #query
    def list_orders(self, user_id: int) -> list[OrderModel]:
        return list(self._load(user_id).orders)

    def get_order(self, user_id: int, order_id: str) -> OrderModel:
        order = self._load(user_id).find_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    #commands
    def create(
        self,
        user_id: int,
        items: list[ItemIn],
        shipping_id: str | None,
        coupon_id: str | None = None,
    ) -> str:
        """
        1. dostawa obowiazkowa - nieznane shipping_id to blad
        2. nieznany kupon = brak kuponu (bez bledu)
        3. snapshot produktow, total, zapis
        """
        shipping = self.catalog.lookup_shipping(shipping_id)
        if shipping is None:
            raise InvalidShipping(shipping_id)

        coupon = self.catalog.lookup_coupon(coupon_id) if coupon_id is not None else None
        if coupon_id is not None and coupon is None:
            logger.info(f"Coupon {coupon_id} not found, creating order without coupon")

        with self.lock_service.hold(user_id):
            user = self._load(user_id)
            order_items = self._snapshot(items)

            order = OrderModel(
                shipping_method=shipping.method,
                shipping_fee=shipping.fee,
                coupon_code=coupon.code if coupon else None,
                coupon_discount=coupon.discount if coupon else None,
                total_amount=order_total(order_items, shipping.fee, coupon.discount if coupon else None),
                created_at=datetime.now(timezone.utc),
            )
            order.items = order_items
            # id nadawane tutaj, nie przy flushu, bo zwracamy je callerowi
            order.id = new_order_id()

            user.orders.append(order)
            self.repo.save(user)

        logger.info(f"Order {order.id} created for user {user_id}, total {order.total_amount}")
        return order.id

    def update(
        self,
        user_id: int,
        order_id: str,
        items: list[ItemIn],
        shipping_method: str,
        shipping_fee: Decimal,
        coupon: CouponIn | CouponRecord | None = None,
    ) -> None:
        """
        Edycja zamowienia. Produkty sa rozwiazywane ponownie z katalogu,
        ale dostawa i kupon sa brane od callera tak jak przyszly.
        """
        with self.lock_service.hold(user_id):
            user = self._load(user_id)
            order = user.find_order(order_id)
            if not order:
                raise NotFoundError("Order not found")

            order_items = self._snapshot(items)
            discount = coupon.discount if coupon else None

            order.items = order_items
            order.shipping_method = shipping_method
            order.shipping_fee = shipping_fee
            order.coupon_code = coupon.code if coupon else None
            order.coupon_discount = discount
            order.total_amount = order_total(order_items, shipping_fee, discount)
            order.created_at = datetime.now(timezone.utc)

            self.repo.save(user)

        logger.info(f"Order {order_id} updated for user {user_id}, total {order.total_amount}")

    def delete(self, user_id: int, order_id: str) -> None:
        with self.lock_service.hold(user_id):
            user = self._load(user_id)
            order = user.find_order(order_id)
            if not order:
                raise NotFoundError("Order not found")

            user.orders.remove(order)
            self.repo.save(user)

        logger.info(f"Order {order_id} deleted for user {user_id}")
