# app/schemas/order.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class OrderCreate(SQLModel):
    """
    Payload for placing an order from the current cart.

    Backend derives:
      - user_id from token
      - order_status = 'PENDING'
      - total_amount / items from the cart, priced at placement time
      - address from the user's default address
    """

    shop_id: int = Field(gt=0)
    payment_method: str | None = Field(default=None, max_length=20)

    @field_validator("payment_method")
    @classmethod
    def normalize_method(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().upper()
        return v or None


class OrderAddressRead(SQLModel):
    full_name: str
    phone: str
    house: str
    landmark: str | None = None
    city: str
    state: str
    pincode: str


class OrderPlaced(SQLModel):
    """
    Result of a successful placement. item_count = number of distinct lines.
    """

    order_id: int
    total: float
    item_count: int
    address: OrderAddressRead


class OrderRead(SQLModel):
    """
    Order header as listed to its customer.
    """

    order_id: int
    user_id: int
    shop_id: int
    shop_name: str | None = None
    shop_image: str | None = None
    total_amount: float
    item_count: int
    order_status: str
    payment_status: str
    created_at: datetime
    updated_at: datetime


class OrderItemRead(SQLModel):
    order_item_id: int
    product_id: int
    product_name: str | None = None
    image_url: str | None = None
    quantity: int
    price_at_time: float


class PaymentRead(SQLModel):
    payment_id: int
    amount: float
    payment_method: str
    transaction_id: str | None = None
    payment_status: str | None = None
    created_at: datetime


class OrderDetailRead(OrderRead):
    """
    Full order view including the immutable snapshots.
    """

    items: list[OrderItemRead]
    address: OrderAddressRead | None = None
    payment: PaymentRead | None = None


# -------- Shop side --------


class CustomerRead(SQLModel):
    name: str | None = None
    phone: str | None = None


class OrderPreview(SQLModel):
    name: str | None = None
    qty: int | None = None
    image: str | None = None


class ShopOrderRead(SQLModel):
    """
    Lightweight row for the shop's order list.
    """

    order_id: int
    user_id: int
    shop_id: int
    total_amount: float
    item_count: int
    order_status: str
    payment_status: str
    created_at: datetime
    updated_at: datetime
    customer: CustomerRead
    preview: OrderPreview


class ShopOrderHeader(SQLModel):
    order_id: int
    user_id: int
    shop_id: int
    total_amount: float
    item_count: int
    order_status: str
    payment_status: str
    created_at: datetime
    updated_at: datetime
    customer: CustomerRead


class ShopOrderDetailRead(SQLModel):
    order: ShopOrderHeader
    items: list[OrderItemRead]
    address: OrderAddressRead | None = None
    payment: PaymentRead | None = None


class OrderStatusUpdate(SQLModel):
    """
    Shopkeeper payload to change order status.

    The value is checked against OrderStatus by the service so an unknown
    status yields "Invalid order status" rather than a schema error.
    """

    model_config = ConfigDict(extra="forbid")

    order_status: str

    @field_validator("order_status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().upper()


class OrderStatusRead(SQLModel):
    order_id: int
    order_status: str
