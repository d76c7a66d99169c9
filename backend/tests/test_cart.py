USER = {"X-User-Id": "7"}


def test_add_item_to_cart(client, make_product):
    p = make_product("Malbec", price="250.00", stock=5)
    res = client.post("/cart/items", json={"productId": p.id, "quantity": 2}, headers=USER)
    assert res.status_code == 200
    body = res.json()
    assert body["items"] == [
        {"id": p.id, "name": "Malbec", "price": 250, "quantity": 2, "size_ml": 750, "stock": 5}
    ]
    assert body["subtotal"] == 500


def test_setting_an_item_again_replaces_the_quantity(client, make_product):
    p = make_product()
    client.post("/cart/items", json={"productId": p.id, "quantity": 2}, headers=USER)
    body = client.post("/cart/items", json={"productId": p.id, "quantity": 5}, headers=USER).json()
    assert [it["quantity"] for it in body["items"]] == [5]


def test_get_cart_is_per_user(client, make_product, fill_cart):
    p = make_product()
    fill_cart(7, (p, 1))
    assert len(client.get("/cart", headers=USER).json()["items"]) == 1
    assert client.get("/cart", headers={"X-User-Id": "8"}).json() == {"items": [], "subtotal": 0}
    assert client.get("/cart").status_code == 401


def test_remove_item(client, make_product, fill_cart):
    a = make_product("Malbec")
    b = make_product("Tequila", price="480.00")
    fill_cart(7, (a, 1), (b, 1))
    res = client.delete(f"/cart/items/{a.id}", headers=USER)
    assert res.status_code == 200
    assert [it["name"] for it in res.json()["items"]] == ["Tequila"]
    assert client.delete(f"/cart/items/{a.id}", headers=USER).status_code == 404


def test_invalid_cart_updates(client, make_product):
    p = make_product()
    assert client.post("/cart/items", json={"productId": p.id, "quantity": 0}, headers=USER).status_code == 400
    assert client.post("/cart/items", json={"productId": 9999, "quantity": 1}, headers=USER).status_code == 404
