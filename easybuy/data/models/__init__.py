#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from easybuy.data.models.user import UserModel, RefreshTokenModel
from easybuy.data.models.cart import CartModel, CartItemModel
from easybuy.data.models.order import OrderModel, OrderItemModel
from easybuy.data.models.review import ReviewModel, ReviewImageModel

__all__ = [
    "UserModel",
    "RefreshTokenModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "ReviewModel",
    "ReviewImageModel",
]
