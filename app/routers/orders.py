# app/routers/orders.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_caller
from app.core.identity import AuthenticatedCaller
from app.database import get_session
from app.dependencies import get_order_service
from app.schemas.common import ApiResponse
from app.schemas.order import OrderCreate, OrderDetailRead, OrderPlaced, OrderRead
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post(
    "",
    response_model=ApiResponse[OrderPlaced],
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    caller: AuthenticatedCaller = Depends(require_caller),
    service: OrderService = Depends(get_order_service),
):
    """
    Place an order for `shop_id` from the caller's cart.

    Flow:
      - cart and default address are validated (400 on failure)
      - prices, address and payment are snapshotted, stock is decremented
        and the cart emptied, all in one transaction

    Auth:
      - Requires a valid access token.
    """
    return ApiResponse(
        message="Order placed successfully",
        data=service.place_order(session, caller, payload),
    )


@router.get("", response_model=ApiResponse[list[OrderRead]])
def list_my_orders(
    session: Session = Depends(get_session),
    caller: AuthenticatedCaller = Depends(require_caller),
    service: OrderService = Depends(get_order_service),
):
    """
    List the caller's orders, newest first.
    """
    return ApiResponse(
        message="Orders retrieved successfully",
        data=service.list_user_orders(session, caller.user_id),
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderDetailRead])
def get_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    caller: AuthenticatedCaller = Depends(require_caller),
    service: OrderService = Depends(get_order_service),
):
    """
    Order detail with items, address snapshot and payment.

    403 if the order belongs to another user.
    """
    return ApiResponse(
        message="Order retrieved successfully",
        data=service.get_order_details(session, caller.user_id, order_id),
    )
