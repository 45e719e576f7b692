# app/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import resolve_cart_caller
from app.core.identity import CallerIdentity
from app.database import get_session
from app.dependencies import get_cart_service
from app.schemas.cart import CartItemCreate, CartItemRead, CartItemUpdate, CartRead
from app.schemas.common import ApiResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=ApiResponse[CartRead])
def get_my_cart(
    session: Session = Depends(get_session),
    caller: CallerIdentity = Depends(resolve_cart_caller),
    service: CartService = Depends(get_cart_service),
):
    """
    Get the caller's cart with live prices and totals.

    Auth:
      - Bearer token, or a guest id in X-Guest-Id (generated if absent
        and echoed back in the response header).
    """
    return ApiResponse(
        message="Cart retrieved successfully",
        data=service.get_cart(session, caller),
    )


@router.post("/items", response_model=ApiResponse[CartItemRead])
def add_cart_item(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    caller: CallerIdentity = Depends(resolve_cart_caller),
    service: CartService = Depends(get_cart_service),
):
    """
    Add a product to the cart (increments the line if already present).

    Returns the created or updated line.
    """
    return ApiResponse(
        message="Item added to cart",
        data=service.add_item(session, caller, payload),
    )


@router.put("/items/{item_id}", response_model=ApiResponse[CartItemRead])
def update_cart_item(
    item_id: int,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    caller: CallerIdentity = Depends(resolve_cart_caller),
    service: CartService = Depends(get_cart_service),
):
    """
    Set the quantity of a cart line.
    """
    return ApiResponse(
        message="Cart item updated",
        data=service.update_item(session, caller, item_id, payload.quantity),
    )


@router.delete("/items/{item_id}", response_model=ApiResponse[None])
def remove_cart_item(
    item_id: int,
    session: Session = Depends(get_session),
    caller: CallerIdentity = Depends(resolve_cart_caller),
    service: CartService = Depends(get_cart_service),
):
    service.remove_item(session, caller, item_id)
    return ApiResponse(message="Item removed from cart")


@router.delete("", response_model=ApiResponse[None])
def clear_cart(
    session: Session = Depends(get_session),
    caller: CallerIdentity = Depends(resolve_cart_caller),
    service: CartService = Depends(get_cart_service),
):
    service.clear(session, caller)
    return ApiResponse(message="Cart cleared")
