# app/repositories/order_repo.py
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.order import Order, OrderAddress, OrderItem, Payment
from app.models.product import Product, Shop
from app.models.user import User, UserAddress


class OrderRepository:
    """
    Data access layer for orders, order_items, order_addresses and payments.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for the transaction boundary.
    """

    # ---- Writes (placement transaction) ----

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        return order

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items

    def create_address_snapshot(
        self,
        session: Session,
        order_id: int,
        address: UserAddress,
    ) -> OrderAddress:
        snapshot = OrderAddress(
            order_id=order_id,
            full_name=address.full_name,
            phone=address.phone,
            house=address.house,
            landmark=address.landmark,
            city=address.city,
            state=address.state,
            pincode=address.pincode,
        )
        session.add(snapshot)
        session.flush()
        return snapshot

    def create_payment(self, session: Session, payment: Payment) -> Payment:
        session.add(payment)
        session.flush()
        return payment

    def update_status(
        self,
        session: Session,
        shop_id: int,
        order_id: int,
        status: str,
    ) -> bool:
        """Scoped by shop so one shop can never touch another's order."""
        stmt = (
            update(Order)
            .where(Order.order_id == order_id, Order.shop_id == shop_id)
            .values(order_status=status, updated_at=datetime.now(timezone.utc))
        )
        return session.exec(stmt).rowcount > 0

    # ---- Reads ----

    def list_for_user(self, session: Session, user_id: int) -> list[tuple[Order, Shop]]:
        stmt = (
            select(Order, Shop)
            .join(Shop, Shop.shop_id == Order.shop_id)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.order_id.desc())
        )
        return list(session.exec(stmt).all())

    def get_with_shop(
        self, session: Session, order_id: int
    ) -> tuple[Order, Shop] | None:
        stmt = (
            select(Order, Shop)
            .join(Shop, Shop.shop_id == Order.shop_id)
            .where(Order.order_id == order_id)
        )
        return session.exec(stmt).first()

    def get_for_shop(
        self, session: Session, shop_id: int, order_id: int
    ) -> tuple[Order, User | None] | None:
        stmt = (
            select(Order, User)
            .join(User, User.user_id == Order.user_id, isouter=True)
            .where(Order.order_id == order_id, Order.shop_id == shop_id)
        )
        return session.exec(stmt).first()

    def list_for_shop(
        self, session: Session, shop_id: int
    ) -> list[tuple[Order, User | None]]:
        stmt = (
            select(Order, User)
            .join(User, User.user_id == Order.user_id, isouter=True)
            .where(Order.shop_id == shop_id)
            .order_by(Order.created_at.desc(), Order.order_id.desc())
        )
        return list(session.exec(stmt).all())

    def list_items(
        self, session: Session, order_id: int
    ) -> list[tuple[OrderItem, Product | None]]:
        """Order lines in insertion order, with product display info."""
        stmt = (
            select(OrderItem, Product)
            .join(Product, Product.product_id == OrderItem.product_id, isouter=True)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.order_item_id)
        )
        return list(session.exec(stmt).all())

    def first_items(
        self, session: Session, order_ids: list[int]
    ) -> dict[int, tuple[OrderItem, Product | None]]:
        """
        Preview line per order: the lowest order_item_id of each order.
        """
        if not order_ids:
            return {}
        stmt = (
            select(OrderItem, Product)
            .join(Product, Product.product_id == OrderItem.product_id, isouter=True)
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.order_id, OrderItem.order_item_id)
        )
        previews: dict[int, tuple[OrderItem, Product | None]] = {}
        for item, product in session.exec(stmt).all():
            previews.setdefault(item.order_id, (item, product))
        return previews

    def get_address(self, session: Session, order_id: int) -> OrderAddress | None:
        stmt = select(OrderAddress).where(OrderAddress.order_id == order_id)
        return session.exec(stmt).first()

    def get_payment(self, session: Session, order_id: int) -> Payment | None:
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id)
            .order_by(Payment.created_at.desc(), Payment.payment_id.desc())
        )
        return session.exec(stmt).first()
