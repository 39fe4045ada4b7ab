"""Tests for the /time-entries endpoints."""

import uuid

import pytest
from httpx import AsyncClient

_BASE = "/api/v1/time-entries"


@pytest.fixture
async def project(client: AsyncClient) -> dict:
    response = await client.post(
        "/api/v1/projects",
        json={"name": "Client A", "start_date": "2026-01-01", "hourly_rate": 80000},
    )
    return response.json()["data"]


async def _log(
    client: AsyncClient, project_id: str, day: str, minutes: int = 60, **extra
) -> dict:
    response = await client.post(
        _BASE,
        json={"project_id": project_id, "date": day, "minutes": minutes, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestUpsertTimeEntry:
    """Test POST /time-entries."""

    async def test_creates_entry_with_project_summary(
        self, client: AsyncClient, project: dict
    ):
        data = await _log(client, project["id"], "2026-03-02", 120, description="Design")

        assert data["project_id"] == project["id"]
        assert data["project_name"] == "Client A"
        assert data["project_hourly_rate"] == 80000
        assert data["date"] == "2026-03-02"
        assert data["minutes"] == 120
        assert data["description"] == "Design"

    async def test_same_day_replaces_entry(self, client: AsyncClient, project: dict):
        first = await _log(client, project["id"], "2026-03-02", 60, description="a")
        second = await _log(client, project["id"], "2026-03-02", 45)

        assert second["id"] == first["id"]
        assert second["minutes"] == 45
        assert second["description"] == "a"
        listed = await client.get(_BASE)
        assert len(listed.json()["data"]) == 1

    async def test_unknown_project_is_404(self, client: AsyncClient):
        response = await client.post(
            _BASE,
            json={"project_id": str(uuid.uuid4()), "date": "2026-03-02", "minutes": 60},
        )

        assert response.status_code == 404

    async def test_inactive_project_is_404(self, client: AsyncClient, project: dict):
        await client.patch(f"/api/v1/projects/{project['id']}", json={"is_active": False})

        response = await client.post(
            _BASE,
            json={"project_id": project["id"], "date": "2026-03-02", "minutes": 60},
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("minutes", [0, -5, 1441])
    async def test_minutes_out_of_range_is_400(
        self, client: AsyncClient, project: dict, minutes: int
    ):
        response = await client.post(
            _BASE,
            json={"project_id": project["id"], "date": "2026-03-02", "minutes": minutes},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_requires_auth(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.post(
            _BASE,
            json={"project_id": str(uuid.uuid4()), "date": "2026-03-02", "minutes": 60},
        )
        assert response.status_code == 401


class TestListTimeEntries:
    """Test GET /time-entries."""

    @pytest.fixture
    async def second_project(self, client: AsyncClient) -> dict:
        response = await client.post(
            "/api/v1/projects", json={"name": "Client B", "start_date": "2026-01-01"}
        )
        return response.json()["data"]

    @pytest.fixture
    async def logged(self, client: AsyncClient, project: dict, second_project: dict):
        await _log(client, project["id"], "2026-03-02")
        await _log(client, project["id"], "2026-03-03")
        await _log(client, second_project["id"], "2026-03-04")

    async def test_newest_first(self, client: AsyncClient, logged):
        response = await client.get(_BASE)

        assert [e["date"] for e in response.json()["data"]] == [
            "2026-03-04",
            "2026-03-03",
            "2026-03-02",
        ]

    async def test_filters_by_project(
        self, client: AsyncClient, second_project: dict, logged
    ):
        response = await client.get(_BASE, params={"project_id": second_project["id"]})

        assert [e["project_name"] for e in response.json()["data"]] == ["Client B"]

    async def test_filters_by_date_range(self, client: AsyncClient, logged):
        response = await client.get(
            _BASE, params={"from": "2026-03-03", "to": "2026-03-04"}
        )

        assert [e["date"] for e in response.json()["data"]] == [
            "2026-03-04",
            "2026-03-03",
        ]

    async def test_bad_date_param_is_400(self, client: AsyncClient):
        response = await client.get(_BASE, params={"from": "yesterday"})
        assert response.status_code == 400


class TestWeek:
    """Test GET /time-entries/week."""

    async def test_returns_seven_days_oldest_first(
        self, client: AsyncClient, project: dict
    ):
        for day in ("2026-03-01", "2026-03-08", "2026-03-02", "2026-03-09"):
            await _log(client, project["id"], day)

        response = await client.get(f"{_BASE}/week", params={"start": "2026-03-02"})

        assert response.status_code == 200
        assert [e["date"] for e in response.json()["data"]] == [
            "2026-03-02",
            "2026-03-08",
        ]

    async def test_start_is_required(self, client: AsyncClient):
        response = await client.get(f"{_BASE}/week")
        assert response.status_code == 400


class TestGetTimeEntry:
    """Test GET /time-entries/{id}."""

    async def test_returns_entry(self, client: AsyncClient, project: dict):
        entry = await _log(client, project["id"], "2026-03-02")

        response = await client.get(f"{_BASE}/{entry['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == entry["id"]

    async def test_unknown_id_is_404(self, client: AsyncClient):
        response = await client.get(f"{_BASE}/{uuid.uuid4()}")
        assert response.status_code == 404


class TestUpdateTimeEntry:
    """Test PATCH /time-entries/{id}."""

    async def test_partial_update(self, client: AsyncClient, project: dict):
        entry = await _log(client, project["id"], "2026-03-02", description="keep")

        response = await client.patch(f"{_BASE}/{entry['id']}", json={"minutes": 15})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["minutes"] == 15
        assert data["description"] == "keep"

    async def test_null_description_clears_it(self, client: AsyncClient, project: dict):
        entry = await _log(client, project["id"], "2026-03-02", description="drop")

        response = await client.patch(
            f"{_BASE}/{entry['id']}", json={"description": None}
        )

        assert response.json()["data"]["description"] is None

    @pytest.mark.parametrize("field", ["date", "minutes"])
    async def test_null_required_field_is_400(
        self, client: AsyncClient, project: dict, field: str
    ):
        entry = await _log(client, project["id"], "2026-03-02")

        response = await client.patch(f"{_BASE}/{entry['id']}", json={field: None})

        assert response.status_code == 400

    async def test_moving_onto_taken_day_is_409(
        self, client: AsyncClient, project: dict
    ):
        await _log(client, project["id"], "2026-03-02")
        tuesday = await _log(client, project["id"], "2026-03-03")

        response = await client.patch(
            f"{_BASE}/{tuesday['id']}", json={"date": "2026-03-02"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TIME_ENTRY_EXISTS"

    async def test_unknown_id_is_404(self, client: AsyncClient):
        response = await client.patch(f"{_BASE}/{uuid.uuid4()}", json={"minutes": 10})
        assert response.status_code == 404


class TestDeleteTimeEntry:
    """Test DELETE /time-entries/{id}."""

    async def test_deletes(self, client: AsyncClient, project: dict):
        entry = await _log(client, project["id"], "2026-03-02")

        response = await client.delete(f"{_BASE}/{entry['id']}")

        assert response.status_code == 204
        assert (await client.get(f"{_BASE}/{entry['id']}")).status_code == 404

    async def test_unknown_id_is_404(self, client: AsyncClient):
        response = await client.delete(f"{_BASE}/{uuid.uuid4()}")
        assert response.status_code == 404
