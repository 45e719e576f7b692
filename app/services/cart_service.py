# app/services/cart_service.py
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.identity import AuthenticatedCaller, CallerIdentity, GuestCaller
from app.database import transaction
from app.models.cart import Cart, CartItem
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemRead,
    CartLineView,
    CartRead,
    CartSummary,
)
from app.services.inventory_service import (
    InventoryService,
    quantize_money,
    resolve_line_price,
    stock_limit_error,
)

logger = logging.getLogger(__name__)


def build_cart_summary(lines: list[CartLineView]) -> CartSummary:
    """
    Totals over available lines only.

      - itemCount = sum of quantities (units, not lines)
      - total     = sum of line totals, rounded to cents
    """
    item_count = 0
    total = Decimal("0")
    for line in lines:
        if not line.available:
            continue
        item_count += line.quantity
        total += Decimal(str(line.line_total))
    return CartSummary(item_count=item_count, total=float(quantize_money(total)))


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - one active cart per identity (user or guest)
      - validate every mutation through the inventory oracle
      - enforce existing + requested quantity <= channel stock
      - price lines live from inventory; nothing is snapshotted here
      - merge a guest cart into a user cart at login
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        inventory: InventoryService,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.inventory = inventory

    # ---- internal helpers ----

    def _line_view(self, session: Session, item: CartItem) -> CartLineView:
        product = self.product_repo.get_by_id(session, item.product_id)
        inventory = self.inventory.channel_for(session, item.product_id, item.shop_id)

        listed = product is not None and not product.is_deleted
        price = resolve_line_price(product, inventory)
        base_price = product.base_price if product is not None else None
        selling_price = inventory.selling_price if inventory is not None else None

        return CartLineView(
            item_id=item.item_id,
            product_id=item.product_id,
            shop_id=item.shop_id,
            quantity=item.quantity,
            name=product.name if product is not None else None,
            image_url=product.image_url if product is not None else None,
            base_price=float(base_price) if base_price is not None else None,
            selling_price=float(selling_price) if selling_price is not None else None,
            price=float(price),
            stock_quantity=inventory.stock_quantity if inventory is not None else 0,
            available=listed,
            line_total=float(quantize_money(price * item.quantity)),
            created_at=item.created_at,
        )

    def _build_view(self, session: Session, cart: Cart) -> CartRead:
        items = self.cart_repo.list_items(session, cart.cart_id)
        lines = [self._line_view(session, item) for item in items]
        return CartRead(
            cart_id=cart.cart_id,
            user_id=cart.user_id,
            guest_id=cart.guest_id,
            is_active=cart.is_active,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
            items=lines,
            summary=build_cart_summary(lines),
        )

    def _checked_upsert(
        self,
        session: Session,
        cart_id: int,
        payload: CartItemCreate,
    ) -> CartItem:
        """
        Re-read the line, gate it on stock, then add to it in one transaction.
        """
        existing = self.cart_repo.get_item_by_product(
            session, cart_id, payload.product_id
        )
        shop_id = payload.shop_id
        if existing is not None and existing.shop_id is not None:
            if shop_id is not None and shop_id != existing.shop_id:
                raise ValidationError("Product already in cart from another shop")
            shop_id = existing.shop_id

        availability = self.inventory.check_availability(
            session, payload.product_id, shop_id
        )
        if not availability.exists:
            raise NotFoundError("Product not found")
        if not availability.available:
            raise ValidationError("Product is out of stock")

        current = existing.quantity if existing is not None else 0
        if current + payload.quantity > availability.stock_quantity:
            raise stock_limit_error(availability.stock_quantity)

        with transaction(session):
            item = self.cart_repo.add_or_increment(
                session, cart_id, payload.product_id, payload.quantity, availability.shop_id
            )
            self.cart_repo.touch(session, cart_id)
        return item

    def _require_item(
        self, session: Session, identity: CallerIdentity, item_id: int
    ) -> tuple[Cart, CartItem]:
        cart = self.cart_repo.get_active(session, identity)
        item = self.cart_repo.get_item(session, cart.cart_id, item_id) if cart else None
        if item is None:
            raise NotFoundError("Cart item not found")
        return cart, item

    # ---- public operations ----

    def get_or_create_cart(self, session: Session, identity: CallerIdentity) -> Cart:
        return self.cart_repo.get_or_create(session, identity)

    def get_cart_view(
        self, session: Session, identity: CallerIdentity
    ) -> CartRead | None:
        """
        Cart plus its lines joined live against product and inventory,
        or None if the identity has no active cart.
        """
        cart = self.cart_repo.get_active(session, identity)
        if cart is None:
            return None
        return self._build_view(session, cart)

    def get_cart(self, session: Session, identity: CallerIdentity) -> CartRead:
        cart = self.cart_repo.get_or_create(session, identity)
        return self._build_view(session, cart)

    def add_item(
        self,
        session: Session,
        identity: CallerIdentity,
        payload: CartItemCreate,
    ) -> CartItemRead:
        """
        Add a product to the identity's cart.

        Rules:
          - quantity must be positive
          - product must exist, not be soft-deleted, and have stock
          - existing line quantity + requested quantity <= stock
          - a product already in the cart keeps the shop it was added from

        A concurrent add of the same product surfaces as IntegrityError;
        the whole check runs once more against the line that won.
        """
        if payload.quantity <= 0:
            raise ValidationError("Quantity must be a positive integer")

        cart = self.cart_repo.get_or_create(session, identity)
        cart_id = cart.cart_id

        try:
            item = self._checked_upsert(session, cart_id, payload)
        except IntegrityError:
            logger.info(
                "Retrying cart upsert cart_id=%s product_id=%s",
                cart_id,
                payload.product_id,
            )
            item = self._checked_upsert(session, cart_id, payload)
        return CartItemRead.model_validate(item)

    def update_item(
        self,
        session: Session,
        identity: CallerIdentity,
        item_id: int,
        quantity: int,
    ) -> CartItemRead:
        """
        Set a line's quantity, re-checked against stock as it is now.
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be a positive integer")

        cart, item = self._require_item(session, identity, item_id)

        availability = self.inventory.check_availability(
            session, item.product_id, item.shop_id
        )
        if not availability.available:
            raise ValidationError("Product is out of stock")
        if quantity > availability.stock_quantity:
            raise stock_limit_error(availability.stock_quantity)

        with transaction(session):
            self.cart_repo.set_quantity(session, item, quantity)
            self.cart_repo.touch(session, cart.cart_id)
        return CartItemRead.model_validate(item)

    def remove_item(
        self, session: Session, identity: CallerIdentity, item_id: int
    ) -> None:
        cart = self.cart_repo.get_active(session, identity)
        if cart is None:
            raise NotFoundError("Cart item not found")
        cart_id = cart.cart_id

        with transaction(session):
            if not self.cart_repo.delete_item(session, cart_id, item_id):
                raise NotFoundError("Cart item not found")
            self.cart_repo.touch(session, cart_id)

    def clear(self, session: Session, identity: CallerIdentity) -> int:
        """
        Remove every line. Succeeds (returning 0) when there is nothing to clear.
        """
        cart = self.cart_repo.get_active(session, identity)
        if cart is None:
            return 0
        cart_id = cart.cart_id

        with transaction(session):
            removed = self.cart_repo.clear(session, cart_id)
            self.cart_repo.touch(session, cart_id)
        return removed

    # ---- guest merge ----

    def _merge_line(self, session: Session, user_cart_id: int, line: CartItem) -> None:
        existing = self.cart_repo.get_item_by_product(
            session, user_cart_id, line.product_id
        )
        shop_id = line.shop_id
        if existing is not None and existing.shop_id is not None:
            shop_id = existing.shop_id

        availability = self.inventory.check_availability(
            session, line.product_id, shop_id
        )
        if not availability.available:
            logger.warning(
                "Merge skipped unavailable product_id=%s", line.product_id
            )
            return

        current = existing.quantity if existing is not None else 0
        wanted = current + line.quantity
        allowed = min(wanted, availability.stock_quantity)
        if allowed < wanted:
            logger.warning(
                "Merge clamped product_id=%s from %s to %s (stock)",
                line.product_id,
                wanted,
                allowed,
            )
        if allowed <= current:
            return

        self.cart_repo.add_or_increment(
            session,
            user_cart_id,
            line.product_id,
            allowed - current,
            availability.shop_id,
        )

    def merge_guest_cart(
        self,
        session: Session,
        user: AuthenticatedCaller,
        guest_id: str,
    ) -> CartRead | None:
        """
        Fold the guest's active cart into the user's cart.

        Quantities of overlapping products are added, then clamped to the
        stock currently available. The guest cart is emptied and
        deactivated, never deleted. Returns the user's cart view, or None
        when the guest had no active cart or nothing in it.
        """
        guest_cart = self.cart_repo.get_active(session, GuestCaller(guest_id=guest_id))
        if guest_cart is None:
            return None
        guest_cart_id = guest_cart.cart_id
        if not self.cart_repo.list_items(session, guest_cart_id):
            return None

        user_cart = self.cart_repo.get_or_create(session, user)
        user_cart_id = user_cart.cart_id

        with transaction(session):
            lines = self.cart_repo.list_items(session, guest_cart_id)
            for line in lines:
                self._merge_line(session, user_cart_id, line)
            self.cart_repo.clear(session, guest_cart_id)
            self.cart_repo.deactivate(session, guest_cart_id)
            self.cart_repo.touch(session, user_cart_id)

        logger.info(
            "Merged guest cart %s (%d lines) into cart %s of user %s",
            guest_cart_id,
            len(lines),
            user_cart_id,
            user.user_id,
        )
        return self._build_view(session, user_cart)
