from pizza_service import __version__


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"message": "welcome to JWT Pizza", "version": __version__}


def test_unknown_endpoint(client):
    res = client.get("/api/nothing/here")
    assert res.status_code == 404
    assert res.json() == {"message": "unknown endpoint"}


def test_docs(client):
    res = client.get("/api/docs")
    assert res.status_code == 200
    body = res.json()
    assert body["version"] == __version__
    assert body["config"]["factory"] == "https://factory.jwt.com"
    assert body["config"]["db"].endswith("pizza.db")

    endpoints = {(e["method"], e["path"]): e for e in body["endpoints"]}
    assert endpoints[("POST", "/api/auth")]["requiresAuth"] is False
    assert endpoints[("DELETE", "/api/auth")]["requiresAuth"] is True
    assert endpoints[("POST", "/api/franchise")]["requiresAuth"] is True
    assert endpoints[("GET", "/api/franchise")]["requiresAuth"] is False
    assert endpoints[("DELETE", "/api/franchise/{franchise_id}")]["requiresAuth"] is False
    assert endpoints[("PUT", "/api/order/menu")]["description"] == "Add an item to the menu"
    assert ("GET", "/api/order/menu") in endpoints
    assert ("GET", "/api/docs") not in endpoints


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"
    assert body["token_denylist"] == "database: healthy"
    assert body["factory_service"] == "mock: healthy"
