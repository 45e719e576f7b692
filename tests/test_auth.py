from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from conftest import API, PASSWORD


def _login(client, email, password=PASSWORD, **extra):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password, **extra})


def test_password_hashing():
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("hunter22", "not-a-bcrypt-hash")


def test_login_issues_token_pair(client, make_user):
    user = make_user(email="buyer@example.com", role="customer")

    resp = _login(client, "Buyer@Example.com")

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["user_id"] == user.user_id
    assert "password_hash" not in body["data"]["user"]
    assert body["data"]["cart"] is None

    access = decode_access_token(body["data"]["tokens"]["accessToken"])
    refresh = decode_refresh_token(body["data"]["tokens"]["refreshToken"])
    assert access["user_id"] == user.user_id
    assert access["role"] == "customer"
    assert refresh["type"] == "refresh"


def test_login_rejects_bad_credentials(client, make_user):
    make_user(email="buyer@example.com")
    make_user(email="gone@example.com", is_deleted=True)

    for resp in (
        _login(client, "buyer@example.com", password="wrong-password"),
        _login(client, "nobody@example.com"),
        _login(client, "gone@example.com"),
    ):
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid email or password"


def test_login_validates_input(client):
    assert _login(client, "not-an-email").status_code == 400
    assert _login(client, "buyer@example.com", guest_id="nope").status_code == 400
    bad_header = client.post(
        f"{API}/auth/login",
        json={"email": "buyer@example.com", "password": PASSWORD},
        headers={"X-Guest-Id": "nope"},
    )
    assert bad_header.status_code == 400
    assert bad_header.json()["message"] == "Invalid guest ID format"


def test_refresh_issues_new_pair(client, make_user):
    user = make_user()
    token = create_refresh_token(user.user_id, user.email, user.role)

    resp = client.post(f"{API}/auth/refresh", json={"refreshToken": token})

    assert resp.status_code == 200
    pair = resp.json()["data"]
    assert decode_access_token(pair["accessToken"])["user_id"] == user.user_id
    assert decode_refresh_token(pair["refreshToken"])["user_id"] == user.user_id


def test_refresh_failures(client, make_user):
    user = make_user()
    deleted = make_user(is_deleted=True)

    missing = client.post(f"{API}/auth/refresh", json={})
    garbage = client.post(f"{API}/auth/refresh", json={"refreshToken": "abc.def.ghi"})
    access_as_refresh = client.post(
        f"{API}/auth/refresh",
        json={"refreshToken": create_access_token(user.user_id, user.email, user.role)},
    )
    gone = client.post(
        f"{API}/auth/refresh",
        json={"refreshToken": create_refresh_token(deleted.user_id, deleted.email, deleted.role)},
    )

    assert missing.status_code == 400
    assert missing.json()["message"] == "Refresh token is required"
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid refresh token"
    assert access_as_refresh.status_code == 401
    assert gone.status_code == 401
    assert gone.json()["message"] == "User not found or account has been deleted"
