# app/repositories/product_repo.py
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.product import Inventory, Product, Shop


class ProductRepository:
    """
    Data access layer for Product, Shop & Inventory.

    - Pure DB operations (queries + the conditional stock decrement).
    - No FastAPI, no business logic, no commits.
    """

    # ----- Products / shops -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def get_shop(self, session: Session, shop_id: int) -> Shop | None:
        return session.get(Shop, shop_id)

    # ----- Inventory -----

    def get_inventory(
        self,
        session: Session,
        shop_id: int,
        product_id: int,
    ) -> Inventory | None:
        """Active (not soft-deleted) inventory row of `product_id` in `shop_id`."""
        stmt = select(Inventory).where(
            Inventory.shop_id == shop_id,
            Inventory.product_id == product_id,
            Inventory.is_deleted == False,
        )
        return session.exec(stmt).first()

    def get_primary_inventory(
        self,
        session: Session,
        product_id: int,
    ) -> Inventory | None:
        """
        Default channel for a product added without a shop: the oldest
        active row that has stock, else the oldest active row.
        """
        stmt = (
            select(Inventory)
            .where(
                Inventory.product_id == product_id,
                Inventory.is_deleted == False,
            )
            .order_by((Inventory.stock_quantity > 0).desc(), Inventory.inventory_id)
        )
        return session.exec(stmt).first()

    def decrement_stock(
        self,
        session: Session,
        shop_id: int,
        product_id: int,
        quantity: int,
    ) -> bool:
        """
        Conditionally take `quantity` units out of stock.

        Returns False when no active row had at least `quantity` units, in
        which case nothing was changed.
        """
        stmt = (
            update(Inventory)
            .where(
                Inventory.shop_id == shop_id,
                Inventory.product_id == product_id,
                Inventory.is_deleted == False,
                Inventory.stock_quantity >= quantity,
            )
            .values(
                stock_quantity=Inventory.stock_quantity - quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return session.exec(stmt).rowcount == 1
