"""Tests for /scenarios endpoints."""

import pytest

from app.main import app
from src.network_model import AssetState, AssetType, Moment

IMPORT_PAYLOAD = {
    "name": "net.inp",
    "assets": [
        {"id": "J1", "type": "junction"},
        {"id": "J2", "type": "junction"},
        {"id": "P1", "type": "pipe", "connections": ["J1", "J2"], "properties": {"status": "open"}},
    ],
}

CLOSE_PIPE = {
    "note": "Close pipe",
    "put_assets": [
        {"id": "P1", "type": "pipe", "connections": ["J1", "J2"], "properties": {"status": "closed"}}
    ],
}


async def pipe_status(client) -> str:
    response = await client.get("/network/assets")
    assets = {asset["id"]: asset for asset in response.json()["assets"]}
    return assets["P1"]["properties"]["status"]


@pytest.fixture
async def imported(client):
    response = await client.post("/network/import", json=IMPORT_PAYLOAD)
    assert response.status_code == 200
    return client


class TestListScenarios:
    """Tests for GET /scenarios."""

    @pytest.mark.asyncio
    async def test_only_main(self, client):
        response = await client.get("/scenarios")
        assert response.status_code == 200

        data = response.json()
        assert len(data) == 1
        assert data[0]["id"] == "main"
        assert data[0]["is_main"] is True
        assert data[0]["is_active"] is True


class TestCreateScenario:
    """Tests for POST /scenarios."""

    @pytest.mark.asyncio
    async def test_create_named(self, imported):
        response = await imported.post("/scenarios", json={"name": "Fire flow"})
        assert response.status_code == 201

        data = response.json()
        assert data["name"] == "Fire flow"
        assert data["is_active"] is True
        assert data["pointer"] == -1
        assert data["counts"] == {"deltas": 0, "puts": 0, "deletes": 0}

    @pytest.mark.asyncio
    async def test_default_name(self, imported):
        response = await imported.post("/scenarios", json={})
        assert response.json()["name"] == "Scenario 1"

    @pytest.mark.asyncio
    async def test_duplicate_name(self, imported):
        await imported.post("/scenarios", json={"name": "A"})
        response = await imported.post("/scenarios", json={"name": "a"})
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "branch_conflict"

    @pytest.mark.asyncio
    async def test_reserved_name(self, imported):
        response = await imported.post("/scenarios", json={"name": "Main"})
        assert response.status_code == 409


class TestSwitchScenario:
    """Tests for POST /scenarios/{id}/switch."""

    @pytest.mark.asyncio
    async def test_scenario_isolation(self, imported):
        """A closed pipe in a scenario leaves main open."""
        created = await imported.post("/scenarios", json={"name": "A"})
        scenario_id = created.json()["id"]

        await imported.post("/network/moments", json=CLOSE_PIPE)

        response = await imported.post("/scenarios/main/switch")
        assert response.status_code == 200
        assert response.json()["is_active"] is True
        assert await pipe_status(imported) == "open"

        response = await imported.post(f"/scenarios/{scenario_id}/switch")
        data = response.json()
        assert data["pointer"] == 0
        assert data["has_draft"] is True
        assert data["counts"] == {"deltas": 1, "puts": 1, "deletes": 0}
        assert await pipe_status(imported) == "closed"

        await imported.post("/network/undo")
        assert await pipe_status(imported) == "open"

        await imported.post("/scenarios/main/switch")
        assert await pipe_status(imported) == "open"

    @pytest.mark.asyncio
    async def test_unknown_branch(self, imported):
        response = await imported.post("/scenarios/nope/switch")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "branch_not_found"

    @pytest.mark.asyncio
    async def test_failed_switch_is_generic(self, imported):
        """Replay failures surface as a generic error and block edits."""
        created = await imported.post("/scenarios", json={"name": "A"})
        scenario_id = created.json()["id"]
        await imported.post("/scenarios/main/switch")

        session = app.state.editor_session
        broken = AssetState(id="P9", type=AssetType.PIPE, connections=("J1", "J404"))
        session.worktree.version_for(scenario_id).log.append(Moment(put_assets=[broken]))

        response = await imported.post(f"/scenarios/{scenario_id}/switch")
        assert response.status_code == 500
        assert response.json()["detail"] == {
            "error": "internal_error",
            "message": "Something went wrong",
        }

        response = await imported.post("/network/moments", json=CLOSE_PIPE)
        assert response.status_code == 409


class TestRenameScenario:
    """Tests for PATCH /scenarios/{id}."""

    @pytest.mark.asyncio
    async def test_rename(self, imported):
        created = await imported.post("/scenarios", json={"name": "A"})
        scenario_id = created.json()["id"]

        response = await imported.patch(f"/scenarios/{scenario_id}", json={"name": "Peak demand"})
        assert response.status_code == 200
        assert response.json()["name"] == "Peak demand"

    @pytest.mark.asyncio
    async def test_rename_main(self, imported):
        response = await imported.patch("/scenarios/main", json={"name": "Base"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_rename_unknown(self, imported):
        response = await imported.patch("/scenarios/nope", json={"name": "X"})
        assert response.status_code == 404


class TestDeleteScenario:
    """Tests for DELETE /scenarios/{id}."""

    @pytest.mark.asyncio
    async def test_delete_active(self, imported):
        created = await imported.post("/scenarios", json={"name": "A"})
        scenario_id = created.json()["id"]
        await imported.post("/network/moments", json=CLOSE_PIPE)

        response = await imported.delete(f"/scenarios/{scenario_id}")
        assert response.status_code == 204

        branches = (await imported.get("/scenarios")).json()
        assert [b["id"] for b in branches] == ["main"]
        assert branches[0]["is_active"] is True
        assert await pipe_status(imported) == "open"

    @pytest.mark.asyncio
    async def test_delete_main(self, imported):
        response = await imported.delete("/scenarios/main")
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_unknown(self, imported):
        response = await imported.delete("/scenarios/nope")
        assert response.status_code == 404
