# app/dependencies.py
"""
Dependency providers for repositories and services.

Routers ask for services through `Depends(get_..._service)`; nothing is
constructed at import time, and tests swap any provider through
`app.dependency_overrides`.
"""
from fastapi import Depends

from app.repositories.address_repo import AddressRepository
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.services.address_service import AddressService
from app.services.auth_service import AuthService
from app.services.cart_service import CartService
from app.services.inventory_service import InventoryService
from app.services.order_service import OrderService
from app.services.shop_order_service import ShopOrderService


# ---- Repositories ----


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_cart_repository() -> CartRepository:
    return CartRepository()


def get_product_repository() -> ProductRepository:
    return ProductRepository()


def get_order_repository() -> OrderRepository:
    return OrderRepository()


def get_address_repository() -> AddressRepository:
    return AddressRepository()


# ---- Services ----


def get_inventory_service(
    products: ProductRepository = Depends(get_product_repository),
) -> InventoryService:
    return InventoryService(products)


def get_cart_service(
    carts: CartRepository = Depends(get_cart_repository),
    products: ProductRepository = Depends(get_product_repository),
    inventory: InventoryService = Depends(get_inventory_service),
) -> CartService:
    return CartService(carts, products, inventory)


def get_order_service(
    orders: OrderRepository = Depends(get_order_repository),
    carts: CartRepository = Depends(get_cart_repository),
    products: ProductRepository = Depends(get_product_repository),
    addresses: AddressRepository = Depends(get_address_repository),
    inventory: InventoryService = Depends(get_inventory_service),
) -> OrderService:
    return OrderService(orders, carts, products, addresses, inventory)


def get_shop_order_service(
    orders: OrderRepository = Depends(get_order_repository),
    products: ProductRepository = Depends(get_product_repository),
) -> ShopOrderService:
    return ShopOrderService(orders, products)


def get_address_service(
    addresses: AddressRepository = Depends(get_address_repository),
) -> AddressService:
    return AddressService(addresses)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    carts: CartService = Depends(get_cart_service),
) -> AuthService:
    return AuthService(users, carts)
