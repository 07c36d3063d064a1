"""Tests for /network endpoints."""

import pytest

from app.main import app

IMPORT_PAYLOAD = {
    "name": "net.inp",
    "assets": [
        {"id": "J1", "type": "junction", "properties": {"elevation": 10}},
        {"id": "J2", "type": "junction", "properties": {"elevation": 12}},
        {
            "id": "P1",
            "type": "pipe",
            "connections": ["J1", "J2"],
            "properties": {"status": "open", "diameter": 300},
        },
    ],
}

CLOSE_PIPE = {
    "note": "Close pipe",
    "put_assets": [
        {
            "id": "P1",
            "type": "pipe",
            "connections": ["J1", "J2"],
            "properties": {"status": "closed", "diameter": 300},
        }
    ],
}


async def pipe_status(client) -> str:
    response = await client.get("/network/assets")
    assets = {asset["id"]: asset for asset in response.json()["assets"]}
    return assets["P1"]["properties"]["status"]


@pytest.fixture
async def imported(client):
    """Client whose session holds the imported network."""
    response = await client.post("/network/import", json=IMPORT_PAYLOAD)
    assert response.status_code == 200
    return client


class TestAssets:
    """Tests for GET /network/assets."""

    @pytest.mark.asyncio
    async def test_empty_document(self, client):
        response = await client.get("/network/assets")
        assert response.status_code == 200

        data = response.json()
        assert data["branch_id"] == "main"
        assert data["asset_count"] == 0
        assert data["assets"] == []

    @pytest.mark.asyncio
    async def test_imported_document(self, imported):
        response = await imported.get("/network/assets")
        data = response.json()
        assert data["asset_count"] == 3
        assert data["map_sync"]["version"] == 1


class TestImport:
    """Tests for POST /network/import."""

    @pytest.mark.asyncio
    async def test_import_seeds_history(self, client):
        response = await client.post("/network/import", json=IMPORT_PAYLOAD)
        assert response.status_code == 200

        data = response.json()
        assert data["applied"] is True
        assert data["pointer"] == 0
        assert data["can_undo"] is False
        assert data["can_redo"] is False

    @pytest.mark.asyncio
    async def test_duplicate_ids(self, client):
        payload = {"name": "dup.inp", "assets": [{"id": "J1", "type": "junction"}] * 2}
        response = await client.post("/network/import", json=payload)
        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "validation_error"


class TestMoments:
    """Tests for POST /network/moments."""

    @pytest.mark.asyncio
    async def test_transact(self, imported):
        response = await imported.post("/network/moments", json=CLOSE_PIPE)
        assert response.status_code == 200

        data = response.json()
        assert data["pointer"] == 1
        assert data["can_undo"] is True
        assert await pipe_status(imported) == "closed"

    @pytest.mark.asyncio
    async def test_empty_moment(self, imported):
        response = await imported.post("/network/moments", json={"note": "Nothing"})
        assert response.status_code == 422

        detail = response.json()["detail"]
        assert detail["error"] == "validation_error"
        assert "no changes" in detail["message"]

    @pytest.mark.asyncio
    async def test_dangling_link(self, imported):
        moment = {
            "put_assets": [{"id": "P2", "type": "pipe", "connections": ["J1", "J404"]}]
        }
        response = await imported.post("/network/moments", json=moment)
        assert response.status_code == 422
        assert response.json()["detail"]["detail"][0]["asset_id"] == "P2"

    @pytest.mark.asyncio
    async def test_malformed_asset(self, imported):
        """Request validation rejects links without endpoints."""
        response = await imported.post(
            "/network/moments",
            json={"put_assets": [{"id": "P2", "type": "pipe"}]},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_validate_does_not_record(self, imported):
        response = await imported.post("/network/moments/validate", json=CLOSE_PIPE)
        assert response.status_code == 200
        assert response.json() == {"valid": True, "issues": []}
        assert await pipe_status(imported) == "open"

    @pytest.mark.asyncio
    async def test_validate_reports_issues(self, imported):
        response = await imported.post("/network/moments/validate", json={"delete_assets": ["J1"]})
        data = response.json()
        assert data["valid"] is False
        assert data["issues"][0]["asset_id"] == "J1"

    @pytest.mark.asyncio
    async def test_corrupted_session(self, imported):
        app.state.editor_session.corrupted = True
        response = await imported.post("/network/moments", json=CLOSE_PIPE)
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "reload_required"


class TestHistory:
    """Tests for POST /network/undo and /network/redo."""

    @pytest.mark.asyncio
    async def test_undo_redo(self, imported):
        await imported.post("/network/moments", json=CLOSE_PIPE)

        response = await imported.post("/network/undo")
        data = response.json()
        assert data["applied"] is True
        assert data["pointer"] == 0
        assert data["can_redo"] is True
        assert await pipe_status(imported) == "open"

        response = await imported.post("/network/redo")
        assert response.json()["applied"] is True
        assert await pipe_status(imported) == "closed"

    @pytest.mark.asyncio
    async def test_nothing_to_undo(self, imported):
        response = await imported.post("/network/undo")
        assert response.status_code == 200
        assert response.json()["applied"] is False

    @pytest.mark.asyncio
    async def test_nothing_to_redo(self, imported):
        response = await imported.post("/network/redo")
        assert response.json()["applied"] is False


class TestSimulation:
    """Tests for the cached simulation endpoints."""

    @pytest.mark.asyncio
    async def test_default_is_idle(self, client):
        response = await client.get("/network/simulation")
        data = response.json()
        assert data["simulation"]["status"] == "idle"
        assert data["is_stale"] is True

    @pytest.mark.asyncio
    async def test_result_goes_stale_after_edit(self, imported):
        state = await imported.get("/network/assets")
        payload = {
            "status": "success",
            "model_version": state.json()["model_version"],
            "summary": {"min_pressure": 21.5},
        }

        response = await imported.put("/network/simulation", json=payload)
        assert response.status_code == 200
        assert response.json()["is_stale"] is False

        await imported.post("/network/moments", json=CLOSE_PIPE)
        response = await imported.get("/network/simulation")
        assert response.json()["is_stale"] is True
        assert response.json()["simulation"]["summary"] == {"min_pressure": 21.5}
