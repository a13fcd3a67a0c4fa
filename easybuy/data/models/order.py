# easybuy/data/models/order.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from easybuy.data.database import Base


def new_order_id() -> str:
    return uuid.uuid4().hex


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_order_id)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    shipping_method = Column(String(100), nullable=False)
    shipping_fee = Column(Numeric(10, 2), nullable=False)
    coupon_code = Column(String(100), nullable=True)
    coupon_discount = Column(Numeric(10, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("UserModel", back_populates="orders")
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    review = relationship(
        "ReviewModel",
        back_populates="order",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def coupon(self) -> dict | None:
        if self.coupon_code is None:
            return None
        return {"code": self.coupon_code, "discount": self.coupon_discount}


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    product_id = Column(String(64), nullable=False)
    name = Column(String(255), nullable=False)
    image_url = Column(String(1024), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("OrderModel", back_populates="items")
