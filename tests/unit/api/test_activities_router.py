"""Tests for the activity service endpoints."""

import httpx
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from src.fitness.core.clients import UserServiceClient
from src.fitness.entities.core.user import UserTable
from src.fitness.entities.service.activity import ActivityTable

ACTIVITY = {
    "type": "RUNNING",
    "duration": 30,
    "caloriesBurned": 310,
    "startTime": "2024-05-01T07:30:00Z",
    "additionalMetrics": {"distanceKm": 5.0},
}


class TestTrackActivity:
    def test_validated_user_can_track(self, activity_client: TestClient, session: Session):
        response = activity_client.post(
            "/api/activities", json=ACTIVITY, headers={"X-User-ID": "kc-1"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["userId"] == "kc-1"
        assert body["type"] == "RUNNING"
        assert body["caloriesBurned"] == 310
        assert body["additionalMetrics"] == {"distanceKm": 5.0}
        # Validation provisioned the user on the user-record service
        user = session.exec(select(UserTable).where(UserTable.external_id == "kc-1")).one()
        assert user.email == "kc-1@users.placeholder.invalid"

    def test_missing_trusted_header_is_401(self, activity_client: TestClient, session: Session):
        response = activity_client.post("/api/activities", json=ACTIVITY)

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "missing_user"
        assert session.exec(select(ActivityTable)).all() == []

    def test_unvalidated_user_is_403_and_nothing_is_written(
        self, activity_app_factory, session: Session
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("user service is slow", request=request)

        client = TestClient(
            activity_app_factory(
                UserServiceClient(
                    "http://user-service", timeout=0.1, transport=httpx.MockTransport(handler)
                )
            )
        )

        response = client.post("/api/activities", json=ACTIVITY, headers={"X-User-ID": "kc-1"})

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["code"] == "user_unvalidated"
        assert detail["userId"] == "kc-1"
        assert session.exec(select(ActivityTable)).all() == []

    def test_invalid_payload_is_422(self, activity_client: TestClient):
        response = activity_client.post(
            "/api/activities",
            json={**ACTIVITY, "type": "SKYDIVING"},
            headers={"X-User-ID": "kc-1"},
        )

        assert response.status_code == 422


class TestListActivities:
    def test_lists_own_activities_newest_first(self, activity_client: TestClient):
        headers = {"X-User-ID": "kc-1"}
        older = activity_client.post("/api/activities", json=ACTIVITY, headers=headers).json()
        newer = activity_client.post(
            "/api/activities",
            json={**ACTIVITY, "startTime": "2024-05-02T07:30:00Z"},
            headers=headers,
        ).json()
        activity_client.post("/api/activities", json=ACTIVITY, headers={"X-User-ID": "kc-2"})

        response = activity_client.get("/api/activities", headers=headers)

        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [newer["id"], older["id"]]

    def test_get_single_activity_is_scoped_to_owner(self, activity_client: TestClient):
        created = activity_client.post(
            "/api/activities", json=ACTIVITY, headers={"X-User-ID": "kc-1"}
        ).json()

        own = activity_client.get(f"/api/activities/{created['id']}", headers={"X-User-ID": "kc-1"})
        other = activity_client.get(
            f"/api/activities/{created['id']}", headers={"X-User-ID": "kc-2"}
        )

        assert own.status_code == 200
        assert other.status_code == 404


class TestReadiness:
    def test_ready_when_user_service_answers(self, activity_client: TestClient):
        response = activity_client.get("/health/ready")

        assert response.status_code == 200
        checks = response.json()["checks"]
        assert checks["database"]["status"] == "healthy"
        assert checks["user_service"]["status"] == "healthy"

    def test_not_ready_without_user_service(self, activity_app_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = TestClient(
            activity_app_factory(
                UserServiceClient(
                    "http://user-service", timeout=0.1, transport=httpx.MockTransport(handler)
                )
            )
        )

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["user_service"]["status"] == "unhealthy"


class TestTrustedHeaderEncoding:
    def test_utf8_user_id_from_gateway(self, activity_client: TestClient):
        headers = {"X-User-ID": "用户-1".encode()}

        created = activity_client.post("/api/activities", json=ACTIVITY, headers=headers)
        listed = activity_client.get("/api/activities", headers=headers)

        assert created.status_code == 201
        assert created.json()["userId"] == "用户-1"
        assert [a["id"] for a in listed.json()] == [created.json()["id"]]
