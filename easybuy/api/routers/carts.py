# easybuy/api/routers/carts.py
from fastapi import APIRouter, Depends

from easybuy.api.deps import get_cart_service, get_current_user_id
from easybuy.domain.schemas import CartAddIn, CartOut, CartRemoveIn, CartRemovedOut, QuantityIn
from easybuy.domain.views import cart_view
from easybuy.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    user_id: int = Depends(get_current_user_id),
    svc: CartService = Depends(get_cart_service),
):
    return cart_view(svc.get_cart(user_id))


@router.post("", response_model=CartOut)
def add_items(
    payload: CartAddIn,
    user_id: int = Depends(get_current_user_id),
    svc: CartService = Depends(get_cart_service),
):
    """Produkty z tym samym product_id sa scalane (suma ilosci)."""
    return cart_view(svc.add_or_merge(user_id, payload.products))


@router.delete("", response_model=CartRemovedOut)
def remove_items(
    payload: CartRemoveIn,
    user_id: int = Depends(get_current_user_id),
    svc: CartService = Depends(get_cart_service),
):
    deleted = svc.remove(user_id, payload.product_ids)
    return CartRemovedOut(message=f"Deleted {deleted} product(s) from cart", deleted=deleted)


@router.put("/{product_id}", response_model=CartOut)
def set_quantity(
    product_id: str,
    payload: QuantityIn,
    user_id: int = Depends(get_current_user_id),
    svc: CartService = Depends(get_cart_service),
):
    return cart_view(svc.set_quantity(user_id, product_id, payload.quantity))
