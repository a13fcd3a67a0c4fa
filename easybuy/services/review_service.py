# easybuy/services/review_service.py
from sqlalchemy.orm import Session

from easybuy.data.models import UserModel, OrderModel, ReviewModel, ReviewImageModel
from easybuy.domain.errors import AlreadyExists, InvalidRating, NotFoundError, ValidationError
from easybuy.repos.user_repo import UserRepo
from easybuy.services.lock_service import LockService
from easybuy.utils.settings import MAX_REVIEW_IMAGES
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)

IMAGE_CONTENT_TYPE = "image/jpeg"


def parse_rating(rating) -> int:
    """Rating z formularza przychodzi jako string, akceptujemy tylko liczbe calkowita 1-5."""
    if isinstance(rating, bool):
        raise InvalidRating(rating)
    if isinstance(rating, str):
        try:
            rating = int(rating.strip())
        except ValueError:
            raise InvalidRating(rating)
    if not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRating(rating)
    return rating


class ReviewService:
    """Jedna recenzja na zamowienie: attach raz, detach, obrazki po indeksie."""

    def __init__(self, db: Session, lock_service: LockService, max_images: int = MAX_REVIEW_IMAGES):
        self.repo = UserRepo(db)
        self.lock_service = lock_service
        self.max_images = max_images

    def _load_order(self, user_id: int, order_id: str) -> tuple[UserModel, OrderModel]:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        order = user.find_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return user, order

    def attach(
        self,
        user_id: int,
        order_id: str,
        comment: str | None,
        rating,
        images: list[bytes] | None = None,
    ) -> None:
        rating = parse_rating(rating)
        images = list(images or [])
        if len(images) > self.max_images:
            raise ValidationError(f"At most {self.max_images} images per review")

        with self.lock_service.hold(user_id):
            user, order = self._load_order(user_id, order_id)

            #pusty placeholder mozna nadpisac, wypelniona recenzje nie
            if order.review is not None and not order.review.is_empty:
                raise AlreadyExists("Review already exists")

            review = order.review or ReviewModel()
            review.comment = comment or ""
            review.rating = rating
            review.images = [ReviewImageModel(data=blob) for blob in images]
            order.review = review
            self.repo.save(user)

        logger.info(f"Review added to order {order_id} ({len(images)} image(s))")

    def detach(self, user_id: int, order_id: str) -> None:
        with self.lock_service.hold(user_id):
            user, order = self._load_order(user_id, order_id)
            if order.review is None:
                raise NotFoundError("Review not found")

            order.review = None
            self.repo.save(user)

        logger.info(f"Review deleted from order {order_id}")

    def fetch_image(self, user_id: int, order_id: str, index: int) -> bytes:
        _, order = self._load_order(user_id, order_id)
        if order.review is None:
            raise NotFoundError("Review not found")

        images = order.review.images
        if not 0 <= index < len(images):
            raise NotFoundError("Image not found")
        return images[index].data
