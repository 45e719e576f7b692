# app/services/inventory_service.py
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlmodel import Session

from app.core.errors import ValidationError
from app.models.product import Inventory, Product
from app.repositories.product_repo import ProductRepository

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_line_price(product: Product | None, inventory: Inventory | None) -> Decimal:
    """
    Charge price of one unit: the channel's selling_price, else the
    product's base_price, else 0.
    """
    if inventory is not None and not inventory.is_deleted:
        if inventory.selling_price is not None:
            return Decimal(inventory.selling_price)
    if product is not None and product.base_price is not None:
        return Decimal(product.base_price)
    return Decimal("0")


def stock_limit_error(stock: int) -> ValidationError:
    return ValidationError(f"Only {stock} items available in stock")


@dataclass
class Availability:
    exists: bool
    available: bool
    stock_quantity: int
    shop_id: int | None = None
    selling_price: Decimal | None = None
    base_price: Decimal | None = None

    def unit_price(self) -> Decimal:
        """selling_price ?? base_price ?? 0 for the resolved channel."""
        if self.selling_price is not None:
            return Decimal(self.selling_price)
        if self.base_price is not None:
            return Decimal(self.base_price)
        return Decimal("0")


class InventoryService:
    """
    Read-only pricing and stock oracle.

    Cart mutations and order placement both gate on `check_availability`;
    no other component reads stock on its own.
    """

    def __init__(self, product_repo: ProductRepository):
        self.product_repo = product_repo

    def channel_for(
        self,
        session: Session,
        product_id: int,
        shop_id: int | None = None,
    ) -> Inventory | None:
        """
        Active inventory row backing `product_id`: the given shop's row, or
        the product's primary channel when no shop is given.
        """
        if shop_id is not None:
            return self.product_repo.get_inventory(session, shop_id, product_id)
        return self.product_repo.get_primary_inventory(session, product_id)

    def check_availability(
        self,
        session: Session,
        product_id: int,
        shop_id: int | None = None,
    ) -> Availability:
        product = self.product_repo.get_by_id(session, product_id)
        if product is None or product.is_deleted:
            return Availability(exists=False, available=False, stock_quantity=0)

        inventory = self.channel_for(session, product_id, shop_id)
        if inventory is None:
            return Availability(
                exists=True,
                available=False,
                stock_quantity=0,
                shop_id=shop_id,
                base_price=product.base_price,
            )

        return Availability(
            exists=True,
            available=inventory.stock_quantity > 0,
            stock_quantity=inventory.stock_quantity,
            shop_id=inventory.shop_id,
            selling_price=inventory.selling_price,
            base_price=product.base_price,
        )
