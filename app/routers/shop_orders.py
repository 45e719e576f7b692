# app/routers/shop_orders.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import as_caller, require_role
from app.database import get_session
from app.dependencies import get_shop_order_service
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.order import (
    OrderStatusRead,
    OrderStatusUpdate,
    ShopOrderDetailRead,
    ShopOrderRead,
)
from app.services.shop_order_service import ShopOrderService

router = APIRouter(prefix="/shop-orders", tags=["Shop orders"])

require_shopkeeper = require_role("shopkeeper")


@router.get("/{shop_id}", response_model=ApiResponse[list[ShopOrderRead]])
def list_shop_orders(
    shop_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(require_shopkeeper),
    service: ShopOrderService = Depends(get_shop_order_service),
):
    """
    Orders received by one of the caller's shops.

    Auth:
      - role="shopkeeper" and owner of `shop_id`.
    """
    return ApiResponse(
        message="Shop orders retrieved successfully",
        data=service.list_orders(session, as_caller(user), shop_id),
    )


@router.get("/{shop_id}/{order_id}", response_model=ApiResponse[ShopOrderDetailRead])
def get_shop_order(
    shop_id: int,
    order_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(require_shopkeeper),
    service: ShopOrderService = Depends(get_shop_order_service),
):
    return ApiResponse(
        message="Order retrieved successfully",
        data=service.get_order_details(session, as_caller(user), shop_id, order_id),
    )


@router.put("/{shop_id}/{order_id}/status", response_model=ApiResponse[OrderStatusRead])
def update_shop_order_status(
    shop_id: int,
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(require_shopkeeper),
    service: ShopOrderService = Depends(get_shop_order_service),
):
    """
    Move an order of this shop to another status
    (PENDING, CONFIRMED, PACKED, SHIPPED, DELIVERED, CANCELLED).
    """
    return ApiResponse(
        message="Order status updated successfully",
        data=service.update_status(
            session, as_caller(user), shop_id, order_id, payload.order_status
        ),
    )
