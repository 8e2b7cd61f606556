from sqlalchemy.exc import OperationalError

from phuongnam.database import get_db


async def test_root_lists_endpoints(client):
    body = (await client.get("/")).json()
    assert body["success"] is True
    assert body["data"]["endpoints"]["reservations"] == "/api/datban"


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["database"] == "healthy"
    assert data["ai"] == {"available": True, "primary": "mock"}


async def test_health_reports_database_outage(app, client):
    class DeadSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def dead_db():
        yield DeadSession()

    app.dependency_overrides[get_db] = dead_db
    response = await client.get("/health")
    app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["success"] is False
    assert response.json()["data"]["database"] == "unhealthy"


async def test_response_time_header(client):
    response = await client.get("/")
    assert response.headers["X-Response-Time"].endswith("ms")


async def test_cors_preflight(client):
    response = await client.options(
        "/api/foods",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:3000")
