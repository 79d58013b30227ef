URL = "/api/categories/"


def _get(client, category_id):
    return client.get(f"{URL}{category_id}").json()["data"]


def _update(client, headers, category, **changes):
    payload = {
        "name": category["name"],
        "parent_id": category["parent_id"],
        "description": category["description"],
        "icon": category["icon"],
        **changes,
    }
    return client.put(f"{URL}{category['id']}", json=payload, headers=headers)


def test_create_root_category(client, admin_headers):
    response = client.post(URL, json={"name": "  Electronics  "}, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["code"] == 201
    data = body["data"]
    assert data["name"] == "Electronics"
    assert data["level"] == 0
    assert data["path"] == ""
    assert data["parent_id"] is None
    assert data["status"] == 1
    assert data["created_by"] == "admin"
    assert data["updated_by"] == "admin"


def test_child_gets_parent_level_plus_one_and_extended_path(make_category):
    electronics = make_category("Electronics")
    phones = make_category("Phones", electronics["id"])
    smart = make_category("Smartphones", phones["id"])

    assert phones["level"] == 1
    assert phones["path"] == f"/{electronics['id']}"
    assert phones["parent_name"] == "Electronics"
    assert smart["level"] == 2
    assert smart["path"] == f"/{electronics['id']}/{phones['id']}"


def test_blank_name_is_rejected(client, admin_headers):
    response = client.post(URL, json={"name": "   "}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_parent_is_rejected(client, admin_headers):
    response = client.post(URL, json={"name": "Orphan", "parent_id": 999}, headers=admin_headers)
    assert response.status_code == 400
    assert "does not exist" in response.json()["message"]


def test_depth_is_limited_to_five_levels(client, admin_headers, make_category):
    parent_id = None
    for level in range(5):
        parent_id = make_category(f"L{level}", parent_id)["id"]

    response = client.post(URL, json={"name": "L5", "parent_id": parent_id}, headers=admin_headers)
    assert response.status_code == 400
    assert "5 levels" in response.json()["message"]


def test_duplicate_sibling_name_is_rejected(client, admin_headers, make_category):
    electronics = make_category("Electronics")
    make_category("Phones", electronics["id"])

    duplicate_root = client.post(URL, json={"name": "Electronics"}, headers=admin_headers)
    duplicate_child = client.post(
        URL, json={"name": "Phones", "parent_id": electronics["id"]}, headers=admin_headers
    )

    assert duplicate_root.status_code == 400
    assert duplicate_child.status_code == 400
    assert "already exists" in duplicate_root.json()["message"]


def test_same_name_under_different_parents_is_allowed(make_category):
    a = make_category("A")
    b = make_category("B")
    first = make_category("Accessories", a["id"])
    second = make_category("Accessories", b["id"])
    assert first["id"] != second["id"]


def test_moving_under_own_descendant_is_rejected(client, admin_headers, make_category):
    electronics = make_category("Electronics")
    phones = make_category("Phones", electronics["id"])

    response = _update(client, admin_headers, electronics, parent_id=phones["id"])

    assert response.status_code == 400
    assert "descendants" in response.json()["message"]
    assert _get(client, electronics["id"])["parent_id"] is None


def test_moving_under_itself_is_rejected(client, admin_headers, make_category):
    electronics = make_category("Electronics")
    response = _update(client, admin_headers, electronics, parent_id=electronics["id"])
    assert response.status_code == 400


def test_rename_keeps_placement(client, admin_headers, make_category):
    electronics = make_category("Electronics")
    phones = make_category("Phones", electronics["id"])

    response = _update(client, admin_headers, phones, name="Mobile Phones", sort=3)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Mobile Phones"
    assert data["sort"] == 3
    assert data["level"] == 1
    assert data["path"] == phones["path"]


def test_update_with_unchanged_name_is_not_a_duplicate(client, admin_headers, make_category):
    electronics = make_category("Electronics")
    response = _update(client, admin_headers, electronics, description="Gadgets")
    assert response.status_code == 200
    assert response.json()["data"]["description"] == "Gadgets"


def test_rename_to_sibling_name_is_rejected(client, admin_headers, make_category):
    make_category("Books")
    music = make_category("Music")
    response = _update(client, admin_headers, music, name="Books")
    assert response.status_code == 400


def test_reparent_cascades_to_descendants(client, admin_headers, make_category):
    a = make_category("A")
    b = make_category("B", a["id"])
    c = make_category("C", b["id"])
    d = make_category("D")

    response = _update(client, admin_headers, b, parent_id=d["id"])
    assert response.status_code == 200

    moved = _get(client, b["id"])
    grandchild = _get(client, c["id"])
    assert moved["level"] == 1
    assert moved["path"] == f"/{d['id']}"
    assert grandchild["level"] == 2
    assert grandchild["path"] == f"/{d['id']}/{b['id']}"
    assert grandchild["path_names"] == ["D", "B", "C"]


def test_move_to_root_cascades(client, admin_headers, make_category):
    a = make_category("A")
    b = make_category("B", a["id"])
    c = make_category("C", b["id"])

    response = _update(client, admin_headers, b, parent_id=None)
    assert response.status_code == 200

    assert _get(client, b["id"])["level"] == 0
    assert _get(client, b["id"])["path"] == ""
    assert _get(client, c["id"])["level"] == 1
    assert _get(client, c["id"])["path"] == f"/{b['id']}"


def test_move_that_pushes_subtree_too_deep_is_rejected(client, admin_headers, make_category):
    # Chain of four levels under "deep"
    deep_id = None
    for level in range(4):
        deep_id = make_category(f"Deep{level}", deep_id)["id"]

    branch = make_category("Branch")
    leaf = make_category("Leaf", branch["id"])

    response = _update(client, admin_headers, branch, parent_id=deep_id)

    assert response.status_code == 400
    assert _get(client, branch["id"])["level"] == 0
    assert _get(client, leaf["id"])["level"] == 1


def test_update_missing_category_is_not_found(client, admin_headers):
    response = client.put(f"{URL}999", json={"name": "Ghost"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_delete_with_children_is_rejected(client, admin_headers, make_category):
    parent = make_category("Parent")
    make_category("Child", parent["id"])

    response = client.delete(f"{URL}{parent['id']}", headers=admin_headers)

    assert response.status_code == 400
    assert "subcategories" in response.json()["message"]
    assert client.get(f"{URL}{parent['id']}").status_code == 200


def test_delete_leaf(client, admin_headers, make_category):
    leaf = make_category("Leaf")

    response = client.delete(f"{URL}{leaf['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get(f"{URL}{leaf['id']}").status_code == 404


def test_delete_with_products_is_rejected(client, admin_headers, make_category, make_product):
    category = make_category("Shoes")
    make_product(category["id"], name="Runner")

    response = client.delete(f"{URL}{category['id']}", headers=admin_headers)
    assert response.status_code == 400
    assert "products" in response.json()["message"]


def test_update_status(client, admin_headers, make_category):
    category = make_category("Seasonal")
    response = client.patch(f"{URL}{category['id']}/status", json={"status": 0}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == 0

    invalid = client.patch(f"{URL}{category['id']}/status", json={"status": 5}, headers=admin_headers)
    assert invalid.status_code == 400


def test_tree_nests_descendants(client, make_category):
    a = make_category("A")
    b = make_category("B", a["id"])
    make_category("C", b["id"])

    response = client.get(f"{URL}tree")

    assert response.status_code == 200
    tree = response.json()["data"]
    assert [node["name"] for node in tree] == ["A"]
    assert [node["name"] for node in tree[0]["children"]] == ["B"]
    assert [node["name"] for node in tree[0]["children"][0]["children"]] == ["C"]
    assert tree[0]["children"][0]["children"][0]["children"] == []


def test_tree_status_filter_hides_disabled_subtree(client, admin_headers, make_category):
    a = make_category("A")
    b = make_category("B", a["id"])
    make_category("C", b["id"])
    make_category("Other")
    client.patch(f"{URL}{b['id']}/status", json={"status": 0}, headers=admin_headers)

    tree = client.get(f"{URL}tree", params={"status": 1}).json()["data"]

    assert [node["name"] for node in tree] == ["A", "Other"]
    assert tree[0]["children"] == []


def test_tree_orders_siblings_by_sort(client, make_category):
    make_category("Second", sort=2)
    make_category("First", sort=1)

    tree = client.get(f"{URL}tree").json()["data"]
    assert [node["name"] for node in tree] == ["First", "Second"]


def test_options_are_flattened_and_indented(client, make_category):
    a = make_category("A")
    b = make_category("B", a["id"])
    c = make_category("C", b["id"])

    options = client.get(f"{URL}options").json()["data"]

    assert [option["value"] for option in options] == [a["id"], b["id"], c["id"]]
    assert [option["label"] for option in options] == ["A", "　B", "　　C"]


def test_options_max_level(client, make_category):
    a = make_category("A")
    b = make_category("B", a["id"])
    make_category("C", b["id"])

    options = client.get(f"{URL}options", params={"max_level": 1}).json()["data"]
    assert [option["label"] for option in options] == ["A", "　B"]


def test_detail_has_path_names(client, make_category):
    a = make_category("Electronics")
    b = make_category("Phones", a["id"])

    detail = _get(client, b["id"])
    assert detail["path_names"] == ["Electronics", "Phones"]
    assert detail["parent_name"] == "Electronics"


def test_list_filters_and_paging(client, make_category):
    electronics = make_category("Electronics", description="Devices")
    make_category("Phones", electronics["id"])
    make_category("Laptops", electronics["id"])
    make_category("Books")

    roots = client.get(URL, params={"parent_id": "null"}).json()["data"]
    assert roots["total"] == 2
    assert {item["name"] for item in roots["list"]} == {"Electronics", "Books"}

    children = client.get(URL, params={"parent_id": electronics["id"]}).json()["data"]
    assert {item["name"] for item in children["list"]} == {"Phones", "Laptops"}
    assert all(item["parent_name"] == "Electronics" for item in children["list"])

    by_keyword = client.get(URL, params={"keyword": "devi"}).json()["data"]
    assert [item["name"] for item in by_keyword["list"]] == ["Electronics"]

    by_level = client.get(URL, params={"level": 1}).json()["data"]
    assert by_level["total"] == 2

    paged = client.get(URL, params={"page": 2, "size": 3}).json()["data"]
    assert paged["total"] == 4
    assert paged["page"] == 2
    assert paged["size"] == 3
    assert len(paged["list"]) == 1


def test_list_rejects_bad_parent_filter(client):
    response = client.get(URL, params={"parent_id": "abc"})
    assert response.status_code == 400


def test_list_orders_by_name_desc(client, make_category):
    for name in ("Beta", "Alpha", "Gamma"):
        make_category(name)

    data = client.get(URL, params={"order_by": "name", "order": "desc"}).json()["data"]
    assert [item["name"] for item in data["list"]] == ["Gamma", "Beta", "Alpha"]


def test_writes_require_authentication(client):
    response = client.post(URL, json={"name": "Anonymous"})
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_writes_require_permission(client, reader_headers):
    response = client.post(URL, json={"name": "Nope"}, headers=reader_headers)
    assert response.status_code == 403


def test_invalid_token_is_unauthorized(client):
    response = client.post(URL, json={"name": "X"}, headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_mutations_are_logged(client, admin_headers, make_category):
    make_category("Logged")
    logs = client.get("/api/logs/", params={"target": "categories"}, headers=admin_headers).json()["data"]
    assert logs["total"] == 1
    assert logs["list"][0]["operation"] == "CREATE"
    assert logs["list"][0]["username"] == "admin"
