# app/services/shop_order_service.py
import logging

from sqlmodel import Session

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.core.identity import AuthenticatedCaller
from app.database import transaction
from app.models.order import Order, OrderStatus
from app.models.product import Shop
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    CustomerRead,
    OrderPreview,
    OrderStatusRead,
    ShopOrderDetailRead,
    ShopOrderHeader,
    ShopOrderRead,
)
from app.services.order_service import address_read, item_reads, payment_read

logger = logging.getLogger(__name__)

VALID_STATUSES = {s.value for s in OrderStatus}


def _customer(user: User | None) -> CustomerRead:
    if user is None:
        return CustomerRead()
    return CustomerRead(name=user.name, phone=user.phone_number)


def _header_fields(order: Order) -> dict:
    return {
        "order_id": order.order_id,
        "user_id": order.user_id,
        "shop_id": order.shop_id,
        "total_amount": float(order.total_amount),
        "item_count": order.item_count,
        "order_status": order.order_status,
        "payment_status": order.payment_status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class ShopOrderService:
    """
    Shopkeeper view of incoming orders.

    Every operation is scoped to one shop the caller owns.
    """

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository):
        self.order_repo = order_repo
        self.product_repo = product_repo

    def ensure_owner(
        self, session: Session, user: AuthenticatedCaller, shop_id: int
    ) -> Shop:
        shop = self.product_repo.get_shop(session, shop_id)
        if shop is None or shop.is_deleted:
            raise NotFoundError("Shop not found")
        if shop.owner_id != user.user_id:
            raise ForbiddenError("You do not have access to this shop")
        return shop

    def list_orders(
        self, session: Session, user: AuthenticatedCaller, shop_id: int
    ) -> list[ShopOrderRead]:
        """
        Orders of the shop, newest first, each with its customer and a
        preview of the first line placed.
        """
        self.ensure_owner(session, user, shop_id)

        rows = self.order_repo.list_for_shop(session, shop_id)
        previews = self.order_repo.first_items(
            session, [order.order_id for order, _ in rows]
        )

        result: list[ShopOrderRead] = []
        for order, customer in rows:
            preview = OrderPreview()
            first = previews.get(order.order_id)
            if first is not None:
                item, product = first
                preview = OrderPreview(
                    name=product.name if product is not None else None,
                    qty=item.quantity,
                    image=product.image_url if product is not None else None,
                )
            result.append(
                ShopOrderRead(
                    **_header_fields(order),
                    customer=_customer(customer),
                    preview=preview,
                )
            )
        return result

    def get_order_details(
        self,
        session: Session,
        user: AuthenticatedCaller,
        shop_id: int,
        order_id: int,
    ) -> ShopOrderDetailRead:
        self.ensure_owner(session, user, shop_id)

        row = self.order_repo.get_for_shop(session, shop_id, order_id)
        if row is None:
            raise NotFoundError("Order not found")
        order, customer = row

        address = self.order_repo.get_address(session, order_id)
        return ShopOrderDetailRead(
            order=ShopOrderHeader(**_header_fields(order), customer=_customer(customer)),
            items=item_reads(self.order_repo.list_items(session, order_id)),
            address=address_read(address) if address is not None else None,
            payment=payment_read(self.order_repo.get_payment(session, order_id)),
        )

    def update_status(
        self,
        session: Session,
        user: AuthenticatedCaller,
        shop_id: int,
        order_id: int,
        new_status: str,
    ) -> OrderStatusRead:
        """
        Move an order to `new_status`.

        The UPDATE is filtered by both order_id and shop_id, so an order of
        another shop is reported as not found.
        """
        if new_status not in VALID_STATUSES:
            raise ValidationError("Invalid order status")

        self.ensure_owner(session, user, shop_id)

        with transaction(session):
            if not self.order_repo.update_status(session, shop_id, order_id, new_status):
                raise NotFoundError("Order not found")

        logger.info("Order %s of shop %s moved to %s", order_id, shop_id, new_status)
        return OrderStatusRead(order_id=order_id, order_status=new_status)
