# easybuy/domain/views.py
# mapowanie modeli ORM na schematy odpowiedzi
from decimal import Decimal
from typing import Callable

from easybuy.domain.schemas import CartOut, LineItemOut, OrderOut, ReviewOut

ImageUrlFor = Callable[[str, int], str]


def line_items(items) -> list[LineItemOut]:
    return [LineItemOut.model_validate(i) for i in items]


def cart_view(cart) -> CartOut:
    total = sum((i.price * i.quantity for i in cart.items), Decimal("0.00"))
    return CartOut(items=line_items(cart.items), total=total)


def order_view(order, image_url_for: ImageUrlFor) -> OrderOut:
    review = None
    if order.review is not None:
        review = ReviewOut(
            comment=order.review.comment or "",
            rating=order.review.rating,
            image_urls=[str(image_url_for(order.id, i)) for i in range(len(order.review.images))],
        )
    return OrderOut(
        id=order.id,
        products=line_items(order.items),
        shipping_method=order.shipping_method,
        shipping_fee=order.shipping_fee,
        coupon=order.coupon,
        total_amount=order.total_amount,
        created_at=order.created_at,
        review=review,
    )
