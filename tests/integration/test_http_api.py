"""HTTP tests for the FastAPI application."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from src.user_directory.core.exceptions import OperationFailedError

ADA = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "address": {
        "country": "UK",
        "city": "London",
        "post_code": "NW1 2DB",
        "street": "12 St James Sq",
    },
}


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["cache"]["backend"] == "InMemoryCacheStore"

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


class TestUsersApi:
    """Test user endpoints end to end."""

    def test_create_and_search(self, client: TestClient):
        """Ada Lovelace is searchable right after creation."""
        created = client.post("/users", json=ADA)

        assert created.status_code == 201
        user = created.json()
        assert user["id"] is not None
        assert user["address"]["city"] == "London"

        found = client.get("/users/search", params={"search": "Ada", "limit": 20})
        assert found.status_code == 200
        assert [u["id"] for u in found.json()] == [user["id"]]

    def test_create_validation_error(self, client: TestClient):
        payload = {**ADA, "email": "not-an-email"}

        response = client.post("/users", json=payload)

        assert response.status_code == 422

    def test_get_update_delete(self, client: TestClient):
        user_id = client.post("/users", json=ADA).json()["id"]

        assert client.get(f"/users/{user_id}").json()["last_name"] == "Lovelace"

        updated = client.put(
            f"/users/{user_id}",
            json={**ADA, "last_name": "King", "address": {**ADA["address"], "city": "Ockham"}},
        )
        assert updated.status_code == 200
        assert updated.json()["last_name"] == "King"
        assert updated.json()["address"]["city"] == "Ockham"

        deleted = client.delete(f"/users/{user_id}")
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "User deleted successfully."}

        missing = client.get(f"/users/{user_id}")
        assert missing.status_code == 404
        assert missing.json()["code"] == "ENTITY_NOT_FOUND"

    def test_update_missing_user(self, client: TestClient):
        response = client.put("/users/999", json=ADA)

        assert response.status_code == 404

    def test_storage_failure_maps_to_503(self, client: TestClient, app_dependencies):
        app_dependencies.user_directory.create_with_address = AsyncMock(
            side_effect=OperationFailedError()
        )

        response = client.post("/users", json=ADA)

        assert response.status_code == 503
        assert response.json()["message"] == "Operation failed"

    def test_clear_cache(self, client: TestClient):
        response = client.post("/users/cache/clear")

        assert response.status_code == 200
        assert response.json() == {"cleared": True}


class TestDashboardApi:
    def test_dashboard(self, client: TestClient, make_user, make_notification):
        make_user("Ada", "Lovelace")
        make_user("Alan", "Turing")
        make_notification(minutes=1)

        response = client.get("/dashboard", params={"search": "Ada", "per_page": 500})

        assert response.status_code == 200
        body = response.json()
        assert body["search"] == "Ada"
        assert body["users"]["per_page"] == 50
        assert [u["first_name"] for u in body["users"]["items"]] == ["Ada"]
        assert body["users"]["links"]["first"] == "?search=Ada&per_page=50&page=1"
        assert len(body["notifications"]) == 1


class TestNotificationsApi:
    def test_feed_and_mark_read(self, client: TestClient, make_notification):
        a = make_notification(minutes=1)
        b = make_notification(minutes=2)
        c = make_notification(minutes=3)

        feed = client.get("/notifications").json()["notifications"]
        assert [n["id"] for n in feed] == [c, b, a]

        response = client.post("/notifications/mark-read", json={"notification_ids": [a, b]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [n["id"] for n in body["notifications"]] == [c]

    def test_mark_read_requires_ids(self, client: TestClient):
        response = client.post("/notifications/mark-read", json={})

        assert response.status_code == 422
        assert "notification_ids" in response.json()["errors"]

    def test_mark_read_rejects_unknown_ids(self, client: TestClient, make_notification):
        a = make_notification()

        response = client.post("/notifications/mark-read", json={"notification_ids": [a, 404]})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_FAILED"


class TestStorageFailuresApi:
    """Reads degrade to empty results, single-entity reads report 503."""

    def test_search_returns_empty_list(self, client: TestClient, broken_database):
        response = client.get("/users/search", params={"search": "ada"})

        assert response.status_code == 200
        assert response.json() == []

    def test_feed_returns_empty_list(self, client: TestClient, broken_database):
        response = client.get("/notifications")

        assert response.status_code == 200
        assert response.json() == {"notifications": []}

    def test_dashboard_stays_well_formed(self, client: TestClient, broken_database):
        response = client.get("/dashboard", params={"search": "ada"})

        assert response.status_code == 200
        body = response.json()
        assert body["users"]["items"] == []
        assert body["users"]["total"] == 0

    def test_get_user_reports_unavailable(self, client: TestClient, broken_database):
        response = client.get("/users/1")

        assert response.status_code == 503
        assert "db-internal" not in response.text


class TestNotificationPayload:
    def test_feed_entries_carry_user_summary(
        self, client: TestClient, make_user, make_notification
    ):
        ada = make_user("Ada", "Lovelace", "ada@example.com")
        make_notification(user_id=ada.id)

        entry = client.get("/notifications").json()["notifications"][0]

        assert entry["user"] == {
            "id": ada.id,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
        }
