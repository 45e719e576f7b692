import pytest

from conftest import API, auth_headers

ADDRESS = {
    "full_name": "Kiran Shah",
    "phone": "9833333333",
    "house": "4B Palm Court",
    "city": "Surat",
    "state": "GJ",
    "pincode": "395001",
}


@pytest.fixture
def user(make_user):
    return make_user()


def _create(client, user, **overrides):
    return client.post(
        f"{API}/addresses", json={**ADDRESS, **overrides}, headers=auth_headers(user)
    )


def _defaults(client, user):
    addresses = client.get(f"{API}/addresses", headers=auth_headers(user)).json()["data"]
    return [a["address_id"] for a in addresses if a["is_default"]]


def test_create_and_list(client, user):
    resp = _create(client, user, landmark="  ")

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["city"] == "Surat"
    assert data["landmark"] is None
    assert data["is_default"] is False

    listed = client.get(f"{API}/addresses", headers=auth_headers(user)).json()["data"]
    assert [a["address_id"] for a in listed] == [data["address_id"]]


def test_new_default_replaces_old_one(client, user):
    first = _create(client, user, is_default=True).json()["data"]["address_id"]
    second = _create(client, user, is_default=True).json()["data"]["address_id"]

    assert _defaults(client, user) == [second]
    default = client.get(f"{API}/addresses/default", headers=auth_headers(user)).json()["data"]
    assert default["address_id"] == second

    resp = client.put(f"{API}/addresses/{first}/set-default", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["data"]["is_default"] is True
    assert _defaults(client, user) == [first]


def test_default_listed_first(client, user):
    _create(client, user)
    default_id = _create(client, user, is_default=True).json()["data"]["address_id"]
    _create(client, user)

    listed = client.get(f"{API}/addresses", headers=auth_headers(user)).json()["data"]
    assert listed[0]["address_id"] == default_id


def test_delete_is_soft_and_scoped(client, user, make_user):
    address_id = _create(client, user, is_default=True).json()["data"]["address_id"]
    other = make_user()

    assert client.delete(f"{API}/addresses/{address_id}", headers=auth_headers(other)).status_code == 404
    assert client.delete(f"{API}/addresses/{address_id}", headers=auth_headers(user)).status_code == 200
    assert client.delete(f"{API}/addresses/{address_id}", headers=auth_headers(user)).status_code == 404

    assert client.get(f"{API}/addresses", headers=auth_headers(user)).json()["data"] == []
    missing_default = client.get(f"{API}/addresses/default", headers=auth_headers(user))
    assert missing_default.status_code == 404
    assert missing_default.json()["message"] == "No default address found"


def test_set_default_on_unknown_address(client, user):
    resp = client.put(f"{API}/addresses/424242/set-default", headers=auth_headers(user))

    assert resp.status_code == 404
    assert resp.json()["message"] == "Address not found"


def test_validation_and_auth(client, user):
    incomplete = {k: v for k, v in ADDRESS.items() if k != "pincode"}

    missing = client.post(f"{API}/addresses", json=incomplete, headers=auth_headers(user))
    blank = _create(client, user, city="   ")
    anonymous = client.get(f"{API}/addresses")

    assert missing.status_code == 400
    assert missing.json()["message"].startswith("pincode")
    assert blank.status_code == 400
    assert anonymous.status_code == 401
