# app/services/order_service.py
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import (
    ForbiddenError,
    NotFoundError,
    OrderPlacementError,
    ValidationError,
)
from app.core.identity import AuthenticatedCaller
from app.database import transaction
from app.models.cart import CartItem
from app.models.order import Order, OrderItem, OrderStatus, Payment
from app.models.user import UserAddress
from app.repositories.address_repo import AddressRepository
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    OrderAddressRead,
    OrderCreate,
    OrderDetailRead,
    OrderItemRead,
    OrderPlaced,
    OrderRead,
    PaymentRead,
)
from app.services.inventory_service import (
    InventoryService,
    quantize_money,
    stock_limit_error,
)

settings = get_settings()
logger = logging.getLogger(__name__)


@dataclass
class _PricedLine:
    product_id: int
    shop_id: int
    quantity: int
    price: Decimal


def address_read(address) -> OrderAddressRead:
    """Address fields shared by UserAddress and the OrderAddress snapshot."""
    return OrderAddressRead(
        full_name=address.full_name,
        phone=address.phone,
        house=address.house,
        landmark=address.landmark,
        city=address.city,
        state=address.state,
        pincode=address.pincode,
    )


def payment_read(payment: Payment | None) -> PaymentRead | None:
    if payment is None:
        return None
    return PaymentRead(
        payment_id=payment.payment_id,
        amount=float(payment.amount),
        payment_method=payment.payment_method,
        transaction_id=payment.transaction_id,
        payment_status=payment.payment_status,
        created_at=payment.created_at,
    )


def item_reads(rows) -> list[OrderItemRead]:
    return [
        OrderItemRead(
            order_item_id=item.order_item_id,
            product_id=item.product_id,
            product_name=product.name if product is not None else None,
            image_url=product.image_url if product is not None else None,
            quantity=item.quantity,
            price_at_time=float(item.price_at_time),
        )
        for item, product in rows
    ]


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Turn the user's cart into an order in one atomic transaction
      - Snapshot prices and the default address at placement time
      - Decrement stock conditionally, aborting the whole order on a miss
      - Serve the user's own orders, enforcing ownership
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        address_repo: AddressRepository,
        inventory: InventoryService,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.address_repo = address_repo
        self.inventory = inventory

    # -------- Placement --------

    def _load_preconditions(
        self, session: Session, user: AuthenticatedCaller
    ) -> tuple[int, list[CartItem], UserAddress]:
        """
        Cart must have lines and the user must have a default address.
        Checked before the transaction and again inside it.
        """
        cart = self.cart_repo.get_active(session, user)
        items = self.cart_repo.list_items(session, cart.cart_id) if cart else []
        if not items:
            raise ValidationError("Cart is empty")

        address = self.address_repo.get_default(session, user.user_id)
        if address is None:
            raise ValidationError("No default address found")

        return cart.cart_id, items, address

    def _price_lines(
        self, session: Session, items: list[CartItem], shop_id: int
    ) -> list[_PricedLine]:
        """
        Gate every line through the inventory oracle and snapshot its price.

        Raises ValidationError for a line from another shop, a delisted
        product, a missing or empty channel, or a quantity above stock.
        """
        priced: list[_PricedLine] = []
        for item in items:
            if item.shop_id is not None and item.shop_id != shop_id:
                raise ValidationError("Cart contains items from another shop")

            availability = self.inventory.check_availability(
                session, item.product_id, shop_id
            )
            if not availability.exists:
                raise ValidationError("Some items in your cart are no longer available")
            if not availability.available:
                raise ValidationError("Product is out of stock")
            if item.quantity > availability.stock_quantity:
                raise stock_limit_error(availability.stock_quantity)

            priced.append(
                _PricedLine(
                    product_id=item.product_id,
                    shop_id=shop_id,
                    quantity=item.quantity,
                    price=quantize_money(availability.unit_price()),
                )
            )
        return priced

    def place_order(
        self,
        session: Session,
        user: AuthenticatedCaller,
        payload: OrderCreate,
    ) -> OrderPlaced:
        """
        Convert the user's cart into an Order.

        Steps (single transaction):
          1. Re-check cart and default address.
          2. Snapshot each line's price: selling_price ?? base_price ?? 0.
          3. Insert Order (item_count = distinct lines, status PENDING).
          4. Insert OrderItem rows with price_at_time.
          5. Insert the OrderAddress copy.
          6. Insert Payment (amount = total).
          7. Decrement stock WHERE stock_quantity >= quantity; any miss
             aborts everything.
          8. Delete the cart's lines; the cart row stays active.

        Validation failures raise before anything is written. Any failure
        inside the transaction rolls it back and leaves the cart intact.
        """
        shop_id = payload.shop_id
        payment_method = payload.payment_method or settings.DEFAULT_PAYMENT_METHOD

        # Fail fast with 4xx before opening the transaction
        _, items, _ = self._load_preconditions(session, user)
        self._price_lines(session, items, shop_id)

        try:
            with transaction(session):
                cart_id, items, address = self._load_preconditions(session, user)
                lines = self._price_lines(session, items, shop_id)

                total = quantize_money(
                    sum((line.price * line.quantity for line in lines), Decimal("0"))
                )

                order = self.order_repo.create_order(
                    session,
                    Order(
                        user_id=user.user_id,
                        shop_id=shop_id,
                        total_amount=total,
                        item_count=len(lines),
                        order_status=OrderStatus.PENDING.value,
                    ),
                )
                order_id = order.order_id

                self.order_repo.create_items(
                    session,
                    [
                        OrderItem(
                            order_id=order_id,
                            product_id=line.product_id,
                            quantity=line.quantity,
                            price_at_time=line.price,
                        )
                        for line in lines
                    ],
                )
                snapshot = self.order_repo.create_address_snapshot(
                    session, order_id, address
                )
                self.order_repo.create_payment(
                    session,
                    Payment(order_id=order_id, amount=total, payment_method=payment_method),
                )

                for line in lines:
                    if not self.product_repo.decrement_stock(
                        session, line.shop_id, line.product_id, line.quantity
                    ):
                        logger.warning(
                            "Stock conflict placing order: shop_id=%s product_id=%s qty=%s",
                            line.shop_id,
                            line.product_id,
                            line.quantity,
                        )
                        raise OrderPlacementError("Failed to place order")

                self.cart_repo.clear(session, cart_id)
                self.cart_repo.touch(session, cart_id)

                result = OrderPlaced(
                    order_id=order_id,
                    total=float(total),
                    item_count=len(lines),
                    address=address_read(snapshot),
                )
        except SQLAlchemyError as exc:
            raise OrderPlacementError("Failed to place order") from exc

        logger.info(
            "Order %s placed by user %s at shop %s: total=%s lines=%s",
            result.order_id,
            user.user_id,
            shop_id,
            result.total,
            result.item_count,
        )
        return result

    # -------- Queries --------

    def list_user_orders(self, session: Session, user_id: int) -> list[OrderRead]:
        rows = self.order_repo.list_for_user(session, user_id)
        return [self._order_read(order, shop) for order, shop in rows]

    def get_order_details(
        self, session: Session, user_id: int, order_id: int
    ) -> OrderDetailRead:
        """
        Full order view for its owner.

        Raises:
            NotFoundError: no such order
            ForbiddenError: the order belongs to someone else
        """
        row = self.order_repo.get_with_shop(session, order_id)
        if row is None:
            raise NotFoundError("Order not found")
        order, shop = row
        if order.user_id != user_id:
            raise ForbiddenError("Unauthorized access to order")

        address = self.order_repo.get_address(session, order_id)
        header = self._order_read(order, shop)
        return OrderDetailRead(
            **header.model_dump(),
            items=item_reads(self.order_repo.list_items(session, order_id)),
            address=address_read(address) if address is not None else None,
            payment=payment_read(self.order_repo.get_payment(session, order_id)),
        )

    def _order_read(self, order: Order, shop) -> OrderRead:
        return OrderRead(
            order_id=order.order_id,
            user_id=order.user_id,
            shop_id=order.shop_id,
            shop_name=shop.name if shop is not None else None,
            shop_image=shop.image_url if shop is not None else None,
            total_amount=float(order.total_amount),
            item_count=order.item_count,
            order_status=order.order_status,
            payment_status=order.payment_status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
