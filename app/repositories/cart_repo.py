# app/repositories/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.identity import AuthenticatedCaller, CallerIdentity
from app.models.cart import Cart, CartItem


class CartRepository:
    """
    Data access layer for carts and cart_items.

    NOTE:
      - Line mutations only flush; the service owns the transaction.
      - `get_or_create` is the exception: it commits on its own so the
        unique active-cart index can arbitrate concurrent creators.
    """

    # ---- Carts ----

    def _owner_clause(self, identity: CallerIdentity):
        if isinstance(identity, AuthenticatedCaller):
            return Cart.user_id == identity.user_id
        return Cart.guest_id == identity.guest_id

    def get_active(self, session: Session, identity: CallerIdentity) -> Cart | None:
        stmt = select(Cart).where(
            self._owner_clause(identity),
            Cart.is_active == True,
        )
        return session.exec(stmt).first()

    def get_or_create(self, session: Session, identity: CallerIdentity) -> Cart:
        """
        Find the identity's active cart or create it.

        Two concurrent callers may both miss the lookup; the loser's INSERT
        violates the partial unique index and it re-reads the winner's cart.
        """
        cart = self.get_active(session, identity)
        if cart is not None:
            return cart

        if isinstance(identity, AuthenticatedCaller):
            cart = Cart(user_id=identity.user_id)
        else:
            cart = Cart(guest_id=identity.guest_id)

        session.add(cart)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            existing = self.get_active(session, identity)
            if existing is None:
                raise
            return existing

        session.refresh(cart)
        return cart

    def touch(self, session: Session, cart_id: int) -> None:
        stmt = (
            update(Cart)
            .where(Cart.cart_id == cart_id)
            .values(updated_at=datetime.now(timezone.utc))
        )
        session.exec(stmt)

    def deactivate(self, session: Session, cart_id: int) -> None:
        stmt = (
            update(Cart)
            .where(Cart.cart_id == cart_id)
            .values(is_active=False, updated_at=datetime.now(timezone.utc))
        )
        session.exec(stmt)

    # ---- Lines ----

    def list_items(self, session: Session, cart_id: int) -> list[CartItem]:
        """Lines of a cart, newest first."""
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.created_at.desc(), CartItem.item_id.desc())
        )
        return list(session.exec(stmt).all())

    def get_item(self, session: Session, cart_id: int, item_id: int) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id,
            CartItem.item_id == item_id,
        )
        return session.exec(stmt).first()

    def get_item_by_product(
        self, session: Session, cart_id: int, product_id: int
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
        )
        return session.exec(stmt).first()

    def add_or_increment(
        self,
        session: Session,
        cart_id: int,
        product_id: int,
        quantity: int,
        shop_id: int | None,
    ) -> CartItem:
        """
        Upsert a line: atomically add `quantity` to an existing
        (cart, product) row, or insert a new one.

        A racing insert of the same product surfaces as IntegrityError on
        flush; the caller decides whether to retry.
        """
        stmt = (
            update(CartItem)
            .where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            .values(quantity=CartItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if session.exec(stmt).rowcount == 0:
            item = CartItem(
                cart_id=cart_id,
                product_id=product_id,
                shop_id=shop_id,
                quantity=quantity,
            )
            session.add(item)
            session.flush()
            return item

        item = self.get_item_by_product(session, cart_id, product_id)
        session.refresh(item)
        return item

    def set_quantity(self, session: Session, item: CartItem, quantity: int) -> CartItem:
        item.quantity = quantity
        session.add(item)
        session.flush()
        return item

    def delete_item(self, session: Session, cart_id: int, item_id: int) -> bool:
        stmt = delete(CartItem).where(
            CartItem.cart_id == cart_id,
            CartItem.item_id == item_id,
        )
        return session.exec(stmt).rowcount > 0

    def clear(self, session: Session, cart_id: int) -> int:
        stmt = delete(CartItem).where(CartItem.cart_id == cart_id)
        return session.exec(stmt).rowcount
