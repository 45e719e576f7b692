import pytest

from app.core.errors import InternalError
from app.core.identity import AuthenticatedCaller, GuestCaller, generate_guest_id
from app.dependencies import get_auth_service
from app.main import app
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.cart import CartItemCreate
from app.services.auth_service import AuthService
from app.services.cart_service import CartService
from app.services.inventory_service import InventoryService
from conftest import API, PASSWORD


@pytest.fixture
def cart_service():
    products = ProductRepository()
    return CartService(CartRepository(), products, InventoryService(products))


@pytest.fixture
def catalog(make_shop, make_product, make_inventory):
    shop = make_shop()
    x = make_product(name="X")
    y = make_product(name="Y")
    rows = {
        "x": make_inventory(shop, x, stock=10, selling_price="10.00"),
        "y": make_inventory(shop, y, stock=10, selling_price="20.00"),
    }
    return {"shop": shop, "x": x, "y": y, "rows": rows}


def _caller(user):
    return AuthenticatedCaller(user_id=user.user_id, email=user.email, role=user.role)


def _quantities(view):
    return {line.name: line.quantity for line in view.items}


def _fill(service, session, identity, lines):
    for product, quantity in lines:
        service.add_item(
            session, identity, CartItemCreate(product_id=product.product_id, quantity=quantity)
        )


def test_merge_combines_overlapping_products(session, cart_service, catalog, make_user):
    user = _caller(make_user())
    guest = GuestCaller(guest_id=generate_guest_id())
    _fill(cart_service, session, user, [(catalog["x"], 3), (catalog["y"], 1)])
    _fill(cart_service, session, guest, [(catalog["x"], 2)])

    view = cart_service.merge_guest_cart(session, user, guest.guest_id)

    assert _quantities(view) == {"X": 5, "Y": 1}
    assert view.summary.item_count == 6
    # guest cart is emptied and retired, not deleted
    assert cart_service.cart_repo.get_active(session, guest) is None


def test_merge_into_empty_user_cart_copies_guest_cart(
    session, cart_service, catalog, make_user
):
    user = _caller(make_user())
    guest = GuestCaller(guest_id=generate_guest_id())
    _fill(cart_service, session, guest, [(catalog["x"], 2), (catalog["y"], 4)])

    view = cart_service.merge_guest_cart(session, user, guest.guest_id)

    assert _quantities(view) == {"X": 2, "Y": 4}
    assert view.user_id == user.user_id


def test_merge_clamps_to_stock_and_skips_unavailable(
    session, cart_service, catalog, make_user
):
    user = _caller(make_user())
    guest = GuestCaller(guest_id=generate_guest_id())
    _fill(cart_service, session, user, [(catalog["x"], 3)])
    _fill(cart_service, session, guest, [(catalog["x"], 2), (catalog["y"], 1)])

    catalog["rows"]["x"].stock_quantity = 4
    catalog["rows"]["y"].stock_quantity = 0
    session.add_all(catalog["rows"].values())
    session.commit()

    view = cart_service.merge_guest_cart(session, user, guest.guest_id)

    assert _quantities(view) == {"X": 4}


def test_merge_without_guest_cart_is_a_no_op(session, cart_service, make_user):
    user = _caller(make_user())

    assert cart_service.merge_guest_cart(session, user, generate_guest_id()) is None


def test_merge_of_empty_guest_cart_is_a_no_op(session, cart_service, make_user):
    user = _caller(make_user())
    guest = GuestCaller(guest_id=generate_guest_id())
    cart_service.get_or_create_cart(session, guest)

    assert cart_service.merge_guest_cart(session, user, guest.guest_id) is None
    assert cart_service.cart_repo.get_active(session, user) is None


def test_login_with_empty_guest_cart_reports_no_merge(client, make_user):
    make_user(email="buyer@example.com")
    guest = {"X-Guest-Id": generate_guest_id()}
    client.get(f"{API}/cart", headers=guest)

    resp = client.post(
        f"{API}/auth/login",
        json={"email": "buyer@example.com", "password": PASSWORD},
        headers=guest,
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Login successful"
    assert resp.json()["data"]["cart"] is None


def test_login_merges_guest_cart_from_header(client, catalog, make_user):
    user = make_user(email="buyer@example.com")
    guest = {"X-Guest-Id": generate_guest_id()}
    client.post(
        f"{API}/cart/items",
        json={"product_id": catalog["x"].product_id, "quantity": 2},
        headers=guest,
    )

    resp = client.post(
        f"{API}/auth/login",
        json={"email": "buyer@example.com", "password": PASSWORD},
        headers=guest,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful (guest cart merged)"
    assert body["data"]["cart"]["user_id"] == user.user_id
    assert [(i["name"], i["quantity"]) for i in body["data"]["cart"]["items"]] == [("X", 2)]

    # the guest id now maps to a fresh, empty cart
    assert client.get(f"{API}/cart", headers=guest).json()["data"]["items"] == []


def test_login_merges_guest_cart_from_body(client, catalog, make_user):
    make_user(email="buyer@example.com")
    guest_id = generate_guest_id()
    client.post(
        f"{API}/cart/items",
        json={"product_id": catalog["y"].product_id, "quantity": 1},
        headers={"X-Guest-Id": guest_id},
    )

    resp = client.post(
        f"{API}/auth/login",
        json={"email": "buyer@example.com", "password": PASSWORD, "guest_id": guest_id},
    )

    assert resp.json()["data"]["cart"]["summary"] == {"itemCount": 1, "total": 20.0}


class ExplodingCartService(CartService):
    def merge_guest_cart(self, session, user, guest_id):
        raise InternalError("cart store unavailable")


def test_failed_merge_does_not_fail_login(client, make_user):
    make_user(email="buyer@example.com")
    products = ProductRepository()
    exploding = ExplodingCartService(CartRepository(), products, InventoryService(products))
    app.dependency_overrides[get_auth_service] = lambda: AuthService(UserRepository(), exploding)

    resp = client.post(
        f"{API}/auth/login",
        json={"email": "buyer@example.com", "password": PASSWORD},
        headers={"X-Guest-Id": generate_guest_id()},
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Login successful"
    assert resp.json()["data"]["cart"] is None
    assert resp.json()["data"]["tokens"]["accessToken"]


class BuggyCartService(CartService):
    def merge_guest_cart(self, session, user, guest_id):
        raise TypeError("unsupported operand type(s) for +: 'int' and 'NoneType'")


def test_unexpected_merge_error_does_not_fail_login(client, make_user):
    make_user(email="buyer@example.com")
    products = ProductRepository()
    buggy = BuggyCartService(CartRepository(), products, InventoryService(products))
    app.dependency_overrides[get_auth_service] = lambda: AuthService(UserRepository(), buggy)

    resp = client.post(
        f"{API}/auth/login",
        json={"email": "buyer@example.com", "password": PASSWORD},
        headers={"X-Guest-Id": generate_guest_id()},
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["cart"] is None
