from models import User


def test_admin_routes_refuse_users(client, user_headers):
    response = client.get("/api/admin-actions/user-admin-stats", headers=user_headers)
    assert response.status_code == 403


def test_user_admin_stats(client, user, admin_headers):
    body = client.get("/api/admin-actions/user-admin-stats", headers=admin_headers).json()
    assert body == {"users": 1, "admins": 1, "total": 2}


def test_shop_stats(client, make_product, admin_headers):
    make_product(shop="Alpha", stock_status="In Stock")
    make_product(shop="Alpha", stock_status="IN STOCK")
    make_product(shop="Alpha", stock_status="Out Of Stock")
    make_product(shop="Beta", stock_status="In Stock")

    body = client.get("/api/admin-actions/shop-stats", headers=admin_headers).json()

    assert body["totalShops"] == 2
    assert body["totalProducts"] == 4
    assert body["shops"][0] == {
        "shop": "Alpha",
        "count": 3,
        "stockStatusCounts": {"in stock": 2, "out of stock": 1},
    }


def test_shop_stats_without_products(client, admin_headers):
    assert client.get("/api/admin-actions/shop-stats", headers=admin_headers).status_code == 404


def test_all_users_paginates(client, make_account, admin_headers):
    for name in ("ann", "ben", "cid"):
        make_account(User, name)

    body = client.get("/api/admin-actions/all-users", params={"page": 2, "limit": 2}, headers=admin_headers).json()

    assert [u["username"] for u in body["users"]] == ["cid"]
    assert body["totalPages"] == 2
    assert body["totalUsers"] == 3


def test_search_users(client, make_account, admin_headers):
    make_account(User, "ann")
    make_account(User, "annabel")
    make_account(User, "ben")

    body = client.get("/api/admin-actions/search-users", params={"query": "ANN"}, headers=admin_headers).json()
    assert sorted(u["username"] for u in body["users"]) == ["ann", "annabel"]

    missing = client.get("/api/admin-actions/search-users", params={"query": "zed"}, headers=admin_headers)
    assert missing.status_code == 404


def test_delete_user(client, user, admin_headers):
    response = client.delete(f"/api/admin-actions/delete-user/{user.id}", headers=admin_headers)
    assert response.status_code == 200

    again = client.delete(f"/api/admin-actions/delete-user/{user.id}", headers=admin_headers)
    assert again.status_code == 404


def test_users_by_date(client, make_account, admin_headers):
    make_account(User, "ann")
    make_account(User, "ben")

    body = client.get("/api/admin-actions/users-by-date", headers=admin_headers).json()

    assert body["total"] == 2
    assert sum(day["count"] for day in body["usersByDate"]) == 2


def test_search_users_treats_wildcards_literally(client, make_account, admin_headers):
    make_account(User, "ann_lee")
    make_account(User, "annxlee")

    body = client.get("/api/admin-actions/search-users", params={"query": "ann_"}, headers=admin_headers).json()
    assert [u["username"] for u in body["users"]] == ["ann_lee"]

    percent = client.get("/api/admin-actions/search-users", params={"query": "%"}, headers=admin_headers)
    assert percent.status_code == 404
