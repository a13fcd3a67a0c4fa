# easybuy/data/models/review.py
from sqlalchemy import Column, Integer, ForeignKey, String, Text, LargeBinary
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from easybuy.data.database import Base


class ReviewModel(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)

    comment = Column(Text, nullable=False, default="")
    rating = Column(Integer, nullable=True)

    order = relationship("OrderModel", back_populates="review")
    images = relationship(
        "ReviewImageModel",
        back_populates="review",
        order_by="ReviewImageModel.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    @property
    def is_empty(self) -> bool:
        return not self.comment and self.rating is None and not self.images


class ReviewImageModel(Base):
    __tablename__ = "review_images"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    data = Column(LargeBinary, nullable=False)

    review = relationship("ReviewModel", back_populates="images")
