def create_cart(client, headers, user_id=1):
    response = client.post(f"/cart/{user_id}", headers=headers)
    assert response.status_code == 201
    return response.json()


def test_create_cart(client, user_headers):
    cart = create_cart(client, user_headers)
    assert cart["user_id"] == 1
    assert cart["status"] == "active"
    assert cart["items"] == []


def test_get_cart_by_id(client, user_headers):
    cart = create_cart(client, user_headers)
    response = client.get(f"/cart/1/{cart['id']}", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["id"] == cart["id"]


def test_get_user_carts(client, user_headers):
    assert client.get("/cart/1", headers=user_headers).status_code == 404

    create_cart(client, user_headers)
    create_cart(client, user_headers)
    response = client.get("/cart/1", headers=user_headers)
    assert response.status_code == 200
    assert len(response.json()) == 2


def test_delete_cart(client, user_headers):
    cart = create_cart(client, user_headers)
    assert client.delete(f"/cart/1/{cart['id']}", headers=user_headers).status_code == 204
    assert client.get(f"/cart/1/{cart['id']}", headers=user_headers).status_code == 404
    assert client.delete(f"/cart/1/{cart['id']}", headers=user_headers).status_code == 404


def test_add_and_remove_items(client, user_headers):
    cart = create_cart(client, user_headers)

    response = client.post(f"/cart/1/{cart['id']}/items", json={"product_id": 2, "quantity": 2}, headers=user_headers)
    assert response.status_code == 201
    response = client.post(f"/cart/1/{cart['id']}/items", json={"product_id": 2}, headers=user_headers)
    assert response.json()["items"] == [{"product_id": 2, "name": "Gel Pen", "price": 2.49, "quantity": 3}]

    response = client.delete(f"/cart/1/{cart['id']}/items/2", headers=user_headers)
    assert response.status_code == 204
    assert client.get(f"/cart/1/{cart['id']}", headers=user_headers).json()["items"] == []
    assert client.delete(f"/cart/1/{cart['id']}/items/2", headers=user_headers).status_code == 404


def test_add_unknown_product_is_400(client, user_headers):
    cart = create_cart(client, user_headers)
    response = client.post(f"/cart/1/{cart['id']}/items", json={"product_id": 999}, headers=user_headers)
    assert response.status_code == 400


def test_add_zero_quantity_is_400(client, user_headers):
    cart = create_cart(client, user_headers)
    response = client.post(f"/cart/1/{cart['id']}/items", json={"product_id": 1, "quantity": 0}, headers=user_headers)
    assert response.status_code == 400


def test_carts_are_scoped_to_their_owner(client, user_headers, admin_headers):
    admin_cart = create_cart(client, admin_headers, user_id=2)

    assert client.post("/cart/2", headers=user_headers).status_code == 403
    assert client.get(f"/cart/2/{admin_cart['id']}", headers=user_headers).status_code == 403
    assert client.get(f"/cart/1/{admin_cart['id']}", headers=user_headers).status_code == 404
    assert client.delete(f"/cart/1/{admin_cart['id']}", headers=user_headers).status_code == 404


def test_cart_routes_require_login(client):
    assert client.post("/cart/1").status_code == 401


def test_cart_for_deleted_account_is_404(client, user_headers):
    assert client.delete("/users/1", headers=user_headers).status_code == 204

    # the session token is still valid, the account behind it is gone
    response = client.post("/cart/1", headers=user_headers)
    assert response.status_code == 404
    assert response.json() == {"message": "User not found in database", "error": "Not Found"}
