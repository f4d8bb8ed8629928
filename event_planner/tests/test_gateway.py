from datetime import datetime

from event_planner.gateway.server import available_routes, create_app

ALLOWED_ORIGIN = "http://localhost:3000"

KNOWN_ROUTES = [
    "GET /",
    "POST /api/events",
    "GET /api/events",
    "PUT /api/events/<int:event_id>",
    "DELETE /api/events/<int:event_id>",
    "POST /api/login",
    "POST /api/register",
    "GET /health",
    "GET /test",
]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "OK"
    assert data["database"] == "connected"
    # Timestamp is ISO-8601
    datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))


def test_root_lists_routes(client):
    response = client.get("/")

    assert response.status_code == 200
    data = response.get_json()
    assert data["message"] == "Server is running!"
    assert sorted(data["availableRoutes"]) == sorted(KNOWN_ROUTES)
    assert "timestamp" in data


def test_available_routes_is_deterministic(app):
    routes = available_routes(app)
    assert routes == available_routes(app)
    paths = [r.split(" ", 1)[1] for r in routes]
    assert paths == sorted(paths)


def test_test_route(client):
    response = client.get("/test")
    assert response.status_code == 200
    assert response.get_json() == {"message": "Test route working!", "path": "/test"}


def test_unknown_path_falls_back(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    data = response.get_json()
    assert data["error"] == "Route not found"
    assert data["requestedPath"] == "/api/nothing-here"
    assert "POST /api/register" in data["availableRoutes"]


def test_unsupported_method_falls_back(client):
    response = client.patch("/api/events/1", json={})

    assert response.status_code == 404
    assert response.get_json()["requestedPath"] == "/api/events/1"


def test_non_numeric_event_id_falls_back(client):
    response = client.delete("/api/events/abc")
    assert response.status_code == 404
    assert "availableRoutes" in response.get_json()


def test_cors_allows_configured_origin(client):
    response = client.get("/health", headers={"Origin": ALLOWED_ORIGIN})
    assert response.headers.get("Access-Control-Allow-Origin") == ALLOWED_ORIGIN


def test_cors_rejects_other_origin(client):
    response = client.get("/health", headers={"Origin": "http://evil.example.com"})
    assert "Access-Control-Allow-Origin" not in response.headers


def test_starts_without_database():
    app = create_app(config={"TESTING": True, "DATABASE_URL": None})
    client = app.test_client()

    health = client.get("/health")
    assert health.status_code == 200
    assert health.get_json()["database"] == "unavailable"

    root = client.get("/")
    assert root.status_code == 200

    events = client.get("/api/events")
    assert events.status_code == 500
    assert "error" in events.get_json()

    login = client.post("/api/login", json={"email": "a@example.com", "password": "pw"})
    assert login.status_code == 500
