# app/schemas/cart.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    `shop_id` pins the inventory channel; without it the product's
    default channel is used.
    """

    model_config = ConfigDict(extra="ignore")

    product_id: int = Field(gt=0)
    quantity: int = Field(default=1, gt=0)
    shop_id: int | None = Field(default=None, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    quantity: int = Field(gt=0)


class CartItemRead(SQLModel):
    """
    Raw cart line as stored (returned by add / update).
    """

    item_id: int
    cart_id: int
    product_id: int
    shop_id: int | None
    quantity: int
    created_at: datetime


class CartLineView(SQLModel):
    """
    Cart line joined live against product and inventory.

    `price` is what the line is charged at: selling_price, else base_price.
    """

    item_id: int
    product_id: int
    shop_id: int | None
    quantity: int
    name: str | None = None
    image_url: str | None = None
    base_price: float | None = None
    selling_price: float | None = None
    price: float
    stock_quantity: int
    available: bool
    line_total: float
    created_at: datetime


class CartSummary(BaseModel):
    """
    Totals over available lines. itemCount counts units, not lines.
    """

    model_config = ConfigDict(populate_by_name=True)

    item_count: int = PydanticField(alias="itemCount")
    total: float


class CartRead(SQLModel):
    """
    Full cart response model with totals.
    """

    cart_id: int
    user_id: int | None = None
    guest_id: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[CartLineView]
    summary: CartSummary
