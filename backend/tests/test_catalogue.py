import os
from datetime import datetime, timedelta, timezone

from app.api import deps
from app.errors import EstimatorUnavailable
from app.main import app
from app.models.product import Product, ProductImage


def test_list_and_search_products(client, make_product):
    make_product("Malbec Reserva")
    make_product("Tequila Reposado")

    res = client.get("/products")
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    assert [p["name"] for p in body["items"]] == ["Malbec Reserva", "Tequila Reposado"]

    found = client.get("/products", params={"q": "tequila"}).json()
    assert [p["name"] for p in found["items"]] == ["Tequila Reposado"]


def test_create_product_with_images(client, db, storage):
    files = [("images", ("frente.jpg", b"\xff\xd8fake", "image/jpeg"))]
    data = {"name": "Mezcal Espadín", "precio": "620", "sabor": "Ahumado", "tamano": "750", "stock": "6"}
    res = client.post("/products", data=data, files=files)
    assert res.status_code == 201
    product = res.json()["product"]
    assert product["precio"] == 620
    assert product["sabor"] == "Ahumado"
    assert product["tamano"] == 750
    assert product["stock"] == 6
    assert len(product["imagenes"]) == 1
    url = product["imagenes"][0]["imageUrl"]
    assert url.startswith("/media/products/")
    assert os.path.exists(os.path.join(storage.root, "products", url.rsplit("/", 1)[1]))


def test_create_product_rejects_bad_numbers(client):
    res = client.post("/products", data={"name": "Vino", "precio": "caro"})
    assert res.status_code == 400
    res = client.post("/products", data={"name": "Vino", "stock": "muchos"})
    assert res.status_code == 400


def test_get_product_detail(client, make_product):
    p = make_product("Malbec", image="/media/products/m.jpg")
    res = client.get(f"/products/{p.id}")
    assert res.status_code == 200
    producto = res.json()["producto"]
    assert producto["name"] == "Malbec"
    assert producto["imagenes"][0]["imageUrl"] == "/media/products/m.jpg"
    assert producto["reviews"] == []

    assert client.get("/products/9999").status_code == 404


def test_update_product_replaces_images(client, db, make_product):
    p = make_product("Malbec", price="250.00", image="/media/products/old.jpg")
    files = [("images", ("nueva.png", b"\x89PNGfake", "image/png"))]
    res = client.put(
        f"/products/{p.id}",
        data={"precio": "275.50", "removeOldImages": "true"},
        files=files,
    )
    assert res.status_code == 200
    product = res.json()["product"]
    assert product["precio"] == 275.5
    assert product["name"] == "Malbec"
    urls = [i["imageUrl"] for i in product["imagenes"]]
    assert len(urls) == 1 and urls[0].endswith(".png")


def test_update_product_keeps_images_by_default(client, make_product):
    p = make_product("Malbec", image="/media/products/old.jpg")
    res = client.put(f"/products/{p.id}", data={"stock": "40"})
    product = res.json()["product"]
    assert product["stock"] == 40
    assert [i["imageUrl"] for i in product["imagenes"]] == ["/media/products/old.jpg"]


def test_delete_product(client, db, make_product):
    pid = make_product("Malbec", image="/media/products/m.jpg").id
    res = client.delete(f"/products/{pid}")
    assert res.status_code == 200
    db.expire_all()
    assert db.query(Product).filter(Product.id == pid).count() == 0
    assert db.query(ProductImage).count() == 0
    assert client.delete(f"/products/{pid}").status_code == 404


def test_admin_list_is_newest_first(client, make_product):
    make_product("Primero")
    make_product("Segundo")
    names = [p["name"] for p in client.get("/products/admin").json()["productos"]]
    assert names == ["Segundo", "Primero"]


def test_low_stock(client, make_product):
    make_product("Rosado", stock=2)
    make_product("Malbec", stock=10)
    make_product("Mezcal", stock=3)
    names = [p["name"] for p in client.get("/products/bajo-stock").json()["productos"]]
    assert names == ["Rosado", "Mezcal"]


def test_recommended_products(client, make_product, recommender):
    a = make_product("Malbec")
    b = make_product("Tequila")
    make_product("Mezcal")
    recommender.ids = [a.id, b.id]

    res = client.get("/products/recomendados", params={"id": str(a.id)})
    assert res.status_code == 200
    assert [p["name"] for p in res.json()["productos"]] == ["Tequila", "Malbec"]

    recommender.ids = []
    assert client.get("/products/recomendados", params={"id": "1"}).json()["productos"] == []


def test_recommended_requires_an_id(client):
    res = client.get("/products/recomendados")
    assert res.status_code == 400
    assert res.json()["message"] == "Falta el ID del producto"
    assert client.get("/products/recomendados", params={"id": "abc"}).status_code == 400


def test_promotions_split_products(client, make_product):
    on_sale = make_product("Malbec")
    expired = make_product("Tequila")
    plain = make_product("Mezcal")

    res = client.post(
        "/promociones",
        json={
            "titulo": "Vendimia",
            "descripcion": "10% en tintos",
            "fechaInicio": "2020-01-01T00:00:00",
            "descuento": 10,
            "productoId": on_sale.id,
        },
    )
    assert res.status_code == 201
    assert res.json()["promocion"]["titulo"] == "Vendimia"

    client.post(
        "/promociones",
        json={
            "titulo": "Verano",
            "fechaInicio": "2020-01-01T00:00:00",
            "fechaFin": "2020-02-01T00:00:00",
            "descuento": 15,
            "productoId": expired.id,
        },
    )

    body = client.get("/products/descuentos").json()
    con = body["productosConDescuento"]
    assert [p["id"] for p in con] == [on_sale.id]
    assert con[0]["promociones"][0]["descuento"] == 10
    assert [p["id"] for p in body["productosSinDescuento"]] == [expired.id, plain.id]


def test_promotion_for_unknown_product(client):
    res = client.post(
        "/promociones",
        json={"titulo": "X", "fechaInicio": "2020-01-01T00:00:00", "productoId": 9999},
    )
    assert res.status_code == 404


def test_recommendation_service_failure(client, make_product):
    class Down:
        def recommend(self, product_id):
            raise EstimatorUnavailable("Error al llamar al servicio de recomendaciones")

    app.dependency_overrides[deps.get_recommender] = lambda: Down()
    p = make_product()
    res = client.get("/products/recomendados", params={"id": str(p.id)})
    assert res.status_code == 500
    assert res.json()["success"] is False


def test_promotion_dates_with_an_offset_are_compared_in_utc(client, make_product):
    starts_soon = make_product("Malbec")
    started = make_product("Tequila")
    now = datetime.now(timezone.utc)

    # 1h ahead in UTC, but 4h ago on a -05:00 wall clock
    in_one_hour = (now + timedelta(hours=1)).astimezone(timezone(timedelta(hours=-5)))
    # 1h ago in UTC, but 4h ahead on a +05:00 wall clock
    an_hour_ago = (now - timedelta(hours=1)).astimezone(timezone(timedelta(hours=5)))

    for product, starts in ((starts_soon, in_one_hour), (started, an_hour_ago)):
        res = client.post(
            "/promociones",
            json={"titulo": "Oferta", "fechaInicio": starts.isoformat(), "productoId": product.id},
        )
        assert res.status_code == 201

    body = client.get("/products/descuentos").json()
    assert [p["id"] for p in body["productosConDescuento"]] == [started.id]
    assert [p["id"] for p in body["productosSinDescuento"]] == [starts_soon.id]
