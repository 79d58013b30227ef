import re

import pytest

from mall_admin.models import Product

URL = "/api/products/"


@pytest.fixture
def category(make_category):
    return make_category("Phones")


def _product(client, product_id, headers):
    return client.get(f"{URL}{product_id}", headers=headers).json()["data"]


def test_create_generates_sku(make_product, category):
    product = make_product(category["id"], name="Phone X", price="199.999")

    assert re.fullmatch(r"P\d{8}\d{4}", product["sku"])
    assert product["price"] == 200.0
    assert product["category_name"] == "Phones"
    assert product["created_by"] == "admin"
    assert product["is_new"] is True


def test_create_with_explicit_sku_and_duplicate(client, admin_headers, make_product, category):
    make_product(category["id"], sku="SKU-1")

    response = client.post(
        URL, json={"name": "Copy", "category_id": category["id"], "price": 5, "sku": "SKU-1"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "SKU already exists" in response.json()["message"]


def test_price_must_be_positive(client, admin_headers, category):
    response = client.post(
        URL, json={"name": "Free", "category_id": category["id"], "price": 0}, headers=admin_headers
    )
    assert response.status_code == 400


def test_original_price_cannot_be_below_price(client, admin_headers, category):
    response = client.post(
        URL,
        json={"name": "Odd", "category_id": category["id"], "price": 10, "original_price": 8},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "Original price" in response.json()["message"]


def test_category_must_exist_and_be_enabled(client, admin_headers, category):
    client.patch(f"/api/categories/{category['id']}/status", json={"status": 0}, headers=admin_headers)

    disabled = client.post(
        URL, json={"name": "P", "category_id": category["id"], "price": 1}, headers=admin_headers
    )
    missing = client.post(URL, json={"name": "P", "category_id": 999, "price": 1}, headers=admin_headers)

    assert disabled.status_code == 400
    assert missing.status_code == 400


def test_cost_above_price_is_accepted_with_warning(make_product, category, caplog):
    with caplog.at_level("WARNING", logger="mall_admin.services.product_service"):
        product = make_product(category["id"], price=10, cost=12)

    assert product["cost"] == 12.0
    assert "above the sale price" in caplog.text


def test_profit_margin_and_primary_image(make_product, category):
    product = make_product(
        category["id"], price=100, cost=60,
        images=["https://cdn.example.com/a.png", " ", "https://cdn.example.com/b.png"],
    )

    assert product["profit_margin"] == 40.0
    assert product["images"] == ["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"]
    assert product["primary_image"] == "https://cdn.example.com/a.png"


def test_detail_has_category_path(client, admin_headers, make_category, make_product):
    electronics = make_category("Electronics")
    phones = make_category("Phones", electronics["id"])
    product = make_product(phones["id"])

    detail = _product(client, product["id"], admin_headers)
    assert detail["category_path"] == ["Electronics", "Phones"]


def test_update_keeps_omitted_fields(client, admin_headers, make_product, category):
    product = make_product(category["id"], name="Old", stock=7, sku="KEEP-1")

    response = client.put(
        f"{URL}{product['id']}",
        json={"name": "New", "category_id": category["id"], "price": 20, "sku": ""},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "New"
    assert data["price"] == 20.0
    assert data["stock"] == 7
    assert data["sku"] == "KEEP-1"


def test_update_rejects_price_above_stored_original_price(client, admin_headers, make_product, category):
    product = make_product(category["id"], price=50, original_price=60)

    response = client.put(
        f"{URL}{product['id']}",
        json={"name": "P", "category_id": category["id"], "price": 70},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert _product(client, product["id"], admin_headers)["price"] == 50.0


def test_zero_original_price_means_none(client, admin_headers, make_product, category):
    product = make_product(category["id"], price=10, original_price=0)
    assert product["original_price"] is None

    listed = make_product(category["id"], price=10, original_price=15)
    cleared = client.put(
        f"{URL}{listed['id']}",
        json={"name": "P", "category_id": category["id"], "price": 10, "original_price": 0},
        headers=admin_headers,
    )
    assert cleared.status_code == 200
    assert cleared.json()["data"]["original_price"] is None


def test_stock_operations(client, admin_headers, make_product, category):
    product = make_product(category["id"], stock=5)
    stock_url = f"{URL}{product['id']}/stock"

    added = client.patch(stock_url, json={"quantity": 3, "operation": "add"}, headers=admin_headers)
    assert added.json()["data"]["stock"] == 8

    reduced = client.patch(stock_url, json={"quantity": 20, "operation": "reduce"}, headers=admin_headers)
    assert reduced.json()["data"]["stock"] == 0

    replaced = client.patch(stock_url, json={"quantity": 11}, headers=admin_headers)
    assert replaced.json()["data"]["stock"] == 11

    invalid = client.patch(stock_url, json={"quantity": -1}, headers=admin_headers)
    assert invalid.status_code == 400


def test_status_and_recommend_flags(client, admin_headers, make_product, category):
    product = make_product(category["id"])

    off = client.patch(f"{URL}{product['id']}/status", json={"status": 0}, headers=admin_headers)
    assert off.json()["data"]["status"] == 0

    flags = client.patch(
        f"{URL}{product['id']}/recommend", json={"is_hot": True, "is_new": False}, headers=admin_headers
    )
    data = flags.json()["data"]
    assert data["is_hot"] is True
    assert data["is_new"] is False
    assert data["is_recommended"] is False

    empty = client.patch(f"{URL}{product['id']}/recommend", json={}, headers=admin_headers)
    assert empty.status_code == 400


def test_list_filters(client, admin_headers, make_category, make_product, category):
    other = make_category("Laptops")
    make_product(category["id"], name="Cheap phone", price=10, stock=0, brand="Acme")
    make_product(category["id"], name="Pricey phone", price=500, stock=3, brand="Zeta")
    make_product(other["id"], name="Laptop", price=900, stock=1)

    def names(**params):
        data = client.get(URL, params=params, headers=admin_headers).json()["data"]
        return sorted(item["name"] for item in data["list"])

    assert names(category_id=category["id"]) == ["Cheap phone", "Pricey phone"]
    assert names(keyword="phone") == ["Cheap phone", "Pricey phone"]
    assert names(min_price=100, max_price=600) == ["Pricey phone"]
    assert names(brand="acm") == ["Cheap phone"]
    assert names(in_stock="true") == ["Laptop", "Pricey phone"]
    assert names(in_stock="false") == ["Cheap phone"]

    ordered = client.get(URL, params={"order_by": "price", "order": "asc"}, headers=admin_headers).json()
    assert [item["price"] for item in ordered["data"]["list"]] == [10.0, 500.0, 900.0]


def test_top_selling_new_and_related(client, admin_headers, db_session, make_product, make_category, category):
    first = make_product(category["id"], name="First")
    second = make_product(category["id"], name="Second")
    hidden = make_product(category["id"], name="Hidden")
    elsewhere = make_product(make_category("Other")["id"], name="Elsewhere")
    client.patch(f"{URL}{hidden['id']}/status", json={"status": 0}, headers=admin_headers)

    db_session.query(Product).filter(Product.id == second["id"]).update({"sales": 50})
    db_session.query(Product).filter(Product.id == first["id"]).update({"sales": 5})
    db_session.commit()

    top = client.get(f"{URL}top-selling", params={"limit": 2}, headers=admin_headers).json()["data"]
    assert [item["name"] for item in top] == ["Second", "First"]

    newest = client.get(f"{URL}new", headers=admin_headers).json()["data"]
    assert hidden["id"] not in [item["id"] for item in newest]

    related = client.get(f"{URL}{first['id']}/related", headers=admin_headers).json()["data"]
    related_ids = [item["id"] for item in related]
    assert related_ids == [second["id"]]
    assert elsewhere["id"] not in related_ids


def test_top_selling_and_new_filter_by_category(client, admin_headers, make_category, make_product, category):
    make_product(category["id"], name="In phones")
    make_product(make_category("Tablets")["id"], name="In tablets")

    for path in ("top-selling", "new"):
        everything = client.get(f"{URL}{path}", headers=admin_headers).json()["data"]
        filtered = client.get(
            f"{URL}{path}", params={"category_id": category["id"]}, headers=admin_headers
        ).json()["data"]

        assert len(everything) == 2
        assert [item["name"] for item in filtered] == ["In phones"]


def test_mutations_are_logged(client, admin_headers, make_product, category):
    product = make_product(category["id"], price=10)

    def product_logs():
        return client.get("/api/logs/", params={"target": "products"}, headers=admin_headers).json()["data"]

    before = product_logs()["total"]
    client.patch(f"{URL}{product['id']}/stock", json={"quantity": 4, "operation": "add"}, headers=admin_headers)
    client.patch(f"{URL}{product['id']}/status", json={"status": 0}, headers=admin_headers)
    client.patch(f"{URL}{product['id']}/recommend", json={"is_hot": True}, headers=admin_headers)
    client.post(
        f"{URL}batch/price",
        json={"ids": [product["id"]], "adjust_type": "percentage", "adjust_value": 5},
        headers=admin_headers,
    )
    client.post(f"{URL}batch/status", json={"ids": [product["id"]], "status": 1}, headers=admin_headers)

    logs = product_logs()
    assert logs["total"] == before + 5
    assert [entry["operation"] for entry in logs["list"]].count("UPDATE") == 5
    assert all(entry["username"] == "admin" for entry in logs["list"])


def test_batch_status_and_category(client, admin_headers, make_category, make_product, category):
    target = make_category("Target")
    ids = [make_product(category["id"], name=f"P{i}")["id"] for i in range(3)]

    status = client.post(f"{URL}batch/status", json={"ids": ids, "status": 0}, headers=admin_headers)
    assert status.json()["data"] == {"modified_count": 3, "total_count": 3}

    moved = client.post(
        f"{URL}batch/category", json={"ids": ids[:2], "category_id": target["id"]}, headers=admin_headers
    )
    assert moved.json()["data"]["modified_count"] == 2
    assert _product(client, ids[0], admin_headers)["category_id"] == target["id"]

    missing = client.post(
        f"{URL}batch/category", json={"ids": ids, "category_id": 999}, headers=admin_headers
    )
    assert missing.status_code == 400


def test_batch_price(client, admin_headers, make_product, category):
    a = make_product(category["id"], price=100)
    b = make_product(category["id"], price="19.99")

    raised = client.post(
        f"{URL}batch/price",
        json={"ids": [a["id"], b["id"]], "adjust_type": "percentage", "adjust_value": 10},
        headers=admin_headers,
    )
    assert raised.json()["data"]["modified_count"] == 2
    assert _product(client, a["id"], admin_headers)["price"] == 110.0
    assert _product(client, b["id"], admin_headers)["price"] == 21.99

    fixed_zero = client.post(
        f"{URL}batch/price",
        json={"ids": [a["id"]], "adjust_type": "fixed", "adjust_value": 0},
        headers=admin_headers,
    )
    assert fixed_zero.json()["data"] == {"modified_count": 0, "total_count": 1}
    assert _product(client, a["id"], admin_headers)["price"] == 110.0


def test_batch_recommend_and_delete(client, admin_headers, make_product, category):
    ids = [make_product(category["id"], name=f"P{i}")["id"] for i in range(2)]

    flagged = client.post(
        f"{URL}batch/recommend", json={"ids": ids, "is_featured": True}, headers=admin_headers
    )
    assert flagged.json()["data"]["modified_count"] == 2
    assert _product(client, ids[1], admin_headers)["is_featured"] is True

    deleted = client.post(f"{URL}batch/delete", json={"ids": ids + [999]}, headers=admin_headers)
    assert deleted.json()["data"] == {"modified_count": 2, "total_count": 3}
    assert client.get(f"{URL}{ids[0]}", headers=admin_headers).status_code == 404

    empty = client.post(f"{URL}batch/delete", json={"ids": []}, headers=admin_headers)
    assert empty.status_code == 400


def test_delete_product(client, admin_headers, make_product, category):
    product = make_product(category["id"])
    response = client.delete(f"{URL}{product['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"{URL}{product['id']}", headers=admin_headers).status_code == 404


def test_reads_need_a_token_and_writes_need_permission(client, reader_headers, make_product, category):
    product = make_product(category["id"])

    assert client.get(URL).status_code == 401
    assert client.get(f"{URL}{product['id']}", headers=reader_headers).status_code == 200

    response = client.post(
        URL, json={"name": "X", "category_id": category["id"], "price": 1}, headers=reader_headers
    )
    assert response.status_code == 403
