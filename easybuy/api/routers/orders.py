# easybuy/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile

from easybuy.api.deps import (
    get_current_user_id,
    get_order_service,
    get_review_service,
    image_url_builder,
)
from easybuy.domain.errors import ValidationError
from easybuy.domain.schemas import (
    MessageOut,
    OrderCreateIn,
    OrderCreatedOut,
    OrderOut,
    OrderUpdateIn,
)
from easybuy.domain.views import order_view
from easybuy.services.order_service import OrderService
from easybuy.services.review_service import IMAGE_CONTENT_TYPE, ReviewService
from easybuy.utils.settings import MAX_IMAGE_BYTES, MAX_REVIEW_IMAGES

router = APIRouter(prefix="/order", tags=["orders"])


@router.get("", response_model=List[OrderOut])
def list_orders(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    image_url_for = image_url_builder(request)
    return [order_view(o, image_url_for) for o in svc.list_orders(user_id)]


@router.post("", response_model=OrderCreatedOut, status_code=201)
def create_order(
    payload: OrderCreateIn,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    order_id = svc.create(
        user_id,
        payload.products,
        shipping_id=payload.shipping_id,
        coupon_id=payload.coupon_id,
    )
    return OrderCreatedOut(order_id=order_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    return order_view(svc.get_order(user_id, order_id), image_url_builder(request))


@router.put("/{order_id}", response_model=MessageOut)
def update_order(
    order_id: str,
    payload: OrderUpdateIn,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    svc.update(
        user_id,
        order_id,
        payload.products,
        shipping_method=payload.shipping_method,
        shipping_fee=payload.shipping_fee,
        coupon=payload.coupon,
    )
    return MessageOut(message="Order updated")


@router.delete("/{order_id}", response_model=MessageOut)
def delete_order(
    order_id: str,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    svc.delete(user_id, order_id)
    return MessageOut(message="Order deleted")


# =====================================================
# REVIEW
# =====================================================
@router.post("/{order_id}/review", response_model=MessageOut, status_code=201)
def add_review(
    order_id: str,
    rating: str | None = Form(default=None),
    comment: str = Form(default=""),
    images: List[UploadFile] | None = File(default=None),
    user_id: int = Depends(get_current_user_id),
    svc: ReviewService = Depends(get_review_service),
):
    uploads = images or []
    if len(uploads) > MAX_REVIEW_IMAGES:
        raise ValidationError(f"At most {MAX_REVIEW_IMAGES} images per review")

    blobs = []
    for upload in uploads:
        # jeden bajt ponad limit wystarczy zeby odrzucic plik
        data = upload.file.read(MAX_IMAGE_BYTES + 1)
        if len(data) > MAX_IMAGE_BYTES:
            raise ValidationError(f"Image {upload.filename} exceeds {MAX_IMAGE_BYTES} bytes")
        blobs.append(data)

    svc.attach(user_id, order_id, comment=comment, rating=rating, images=blobs)
    return MessageOut(message="Review added successfully")


@router.delete("/{order_id}/review", response_model=MessageOut)
def delete_review(
    order_id: str,
    user_id: int = Depends(get_current_user_id),
    svc: ReviewService = Depends(get_review_service),
):
    svc.detach(user_id, order_id)
    return MessageOut(message="Review deleted")


@router.get("/{order_id}/review/image/{index}", name="get_review_image")
def get_review_image(
    order_id: str,
    index: int,
    user_id: int = Depends(get_current_user_id),
    svc: ReviewService = Depends(get_review_service),
):
    data = svc.fetch_image(user_id, order_id, index)
    return Response(content=data, media_type=IMAGE_CONTENT_TYPE)
