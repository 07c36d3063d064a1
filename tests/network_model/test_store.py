"""Tests for the live model store."""

import pytest

from src.network_model import (
    AssetState,
    AssetType,
    ModelIntegrityError,
    ModelStore,
    Moment,
    Snapshot,
)


def junction(asset_id: str, elevation: float = 0) -> AssetState:
    return AssetState(id=asset_id, type=AssetType.JUNCTION, properties={"elevation": elevation})


def pipe(asset_id: str, start: str, end: str, status: str = "open") -> AssetState:
    return AssetState(
        id=asset_id,
        type=AssetType.PIPE,
        connections=(start, end),
        properties={"status": status},
    )


@pytest.fixture
def store():
    """Store holding J1 -P1- J2."""
    store = ModelStore(version="v0")
    store.apply_moment(Moment(
        note="Seed",
        put_assets=[junction("J1", 10), junction("J2", 12), pipe("P1", "J1", "J2")],
    ))
    return store


class TestApplyMoment:
    """Tests for the edit path."""

    def test_puts_assets_and_advances_version(self):
        """A genuine edit materializes assets and mints a new tag."""
        store = ModelStore(version="v0")
        store.apply_moment(Moment(put_assets=[junction("J1")]))
        assert "J1" in store
        assert store.get_model_version() != "v0"

    def test_explicit_state_id(self):
        store = ModelStore()
        store.apply_moment(Moment(put_assets=[junction("J1")]), state_id="s1")
        assert store.get_model_version() == "s1"

    def test_update_replaces_full_state(self, store):
        store.apply_moment(Moment(put_assets=[pipe("P1", "J1", "J2", status="closed")]))
        assert store.get_asset("P1").properties == {"status": "closed"}

    def test_delete_missing_id_is_noop(self, store):
        """Deleting an absent id changes nothing."""
        before = store.asset_map()
        reverse = store.apply_moment(Moment(delete_assets=["J404"]))
        assert store.asset_map() == before
        assert reverse.is_empty


class TestMaterialize:
    """Tests for the replay path and reverse moments."""

    def test_leaves_version_alone(self, store):
        version = store.get_model_version()
        store.materialize(Moment(put_assets=[junction("J3")]))
        assert store.get_model_version() == version
        assert "J3" in store

    def test_reverse_restores_update(self, store):
        """The reverse of an update puts back the previous state."""
        before = store.asset_map()
        reverse = store.materialize(Moment(
            note="Close pipe",
            put_assets=[pipe("P1", "J1", "J2", status="closed")],
        ))
        assert reverse.note == "Reverse Close pipe"
        assert reverse.put_assets == [before["P1"]]
        assert reverse.delete_assets == []

        store.materialize(reverse)
        assert store.asset_map() == before

    def test_reverse_restores_creation(self, store):
        """The reverse of a creation deletes the new asset."""
        before = store.asset_map()
        reverse = store.materialize(Moment(put_assets=[junction("J3"), pipe("P2", "J2", "J3")]))
        assert sorted(reverse.delete_assets) == ["J3", "P2"]

        store.materialize(reverse)
        assert store.asset_map() == before
        assert store.links_for_node("J2") == frozenset({"P1"})

    def test_reverse_restores_deletion(self, store):
        """Deleting a node together with its pipe is undone exactly."""
        before = store.asset_map()
        reverse = store.materialize(Moment(delete_assets=["P1", "J1"]))
        assert "J1" not in store
        assert store.links_for_node("J2") == frozenset()

        store.materialize(reverse)
        assert store.asset_map() == before
        assert store.links_for_node("J1") == frozenset({"P1"})

    def test_rewiring_link_updates_topology(self, store):
        store.materialize(Moment(put_assets=[junction("J3"), pipe("P1", "J1", "J3")]))
        assert store.links_for_node("J2") == frozenset()
        assert store.links_for_node("J3") == frozenset({"P1"})


class TestIntegrity:
    """Tests for referential integrity checks."""

    def test_link_to_missing_node(self, store):
        """A failed moment leaves no trace."""
        before = store.asset_map()
        version = store.get_model_version()

        with pytest.raises(ModelIntegrityError) as exc_info:
            store.apply_moment(Moment(put_assets=[pipe("P2", "J1", "J404")]))

        assert exc_info.value.asset_id == "P2"
        assert "missing node 'J404'" in exc_info.value.message
        assert store.asset_map() == before
        assert store.get_model_version() == version
        assert store.links_for_node("J1") == frozenset({"P1"})

    def test_delete_connected_node(self, store):
        with pytest.raises(ModelIntegrityError) as exc_info:
            store.materialize(Moment(delete_assets=["J1"]))
        assert exc_info.value.asset_id == "J1"
        assert "J1" in store

    def test_link_to_link(self, store):
        with pytest.raises(ModelIntegrityError, match="connects to link"):
            store.materialize(Moment(put_assets=[junction("J3"), pipe("P2", "P1", "J3")]))

    def test_node_replaced_by_link_while_connected(self, store):
        """A connected node cannot turn into a link."""
        with pytest.raises(ModelIntegrityError):
            store.materialize(Moment(put_assets=[junction("J3"), pipe("J1", "J2", "J3")]))
        assert store.get_asset("J1").is_node

    def test_integrity_error_is_value_error(self):
        assert issubclass(ModelIntegrityError, ValueError)


class TestSnapshots:
    """Tests for snapshot capture and restore."""

    def test_capture_lists_every_asset(self, store):
        snapshot = store.capture_model_snapshot()
        assert {asset.id for asset in snapshot.moment.put_assets} == {"J1", "J2", "P1"}
        assert snapshot.moment.delete_assets == []
        assert snapshot.state_id != store.get_model_version()

    def test_restore_replaces_everything(self, store):
        snapshot = store.capture_model_snapshot()
        version = store.get_model_version()

        store.apply_moment(Moment(put_assets=[junction("J3")], delete_assets=["P1"]))
        store.restore_to_base(snapshot)

        assert {asset.id for asset in store} == {"J1", "J2", "P1"}
        assert store.links_for_node("J1") == frozenset({"P1"})
        assert store.get_model_version() != version

    def test_restore_is_idempotent(self, store):
        snapshot = store.capture_model_snapshot()
        store.restore_to_base(snapshot)
        first = store.asset_map()
        store.restore_to_base(snapshot)
        assert store.asset_map() == first

    def test_restore_keeps_version_tag(self, store):
        store.set_model_version("tagged")
        store.restore_to_base(store.capture_model_snapshot())
        assert store.get_model_version() == "tagged"

    def test_failed_restore_rolls_back(self, store):
        before = store.asset_map()
        broken = Snapshot(state_id="bad", moment=Moment(put_assets=[pipe("P9", "J8", "J9")]))
        with pytest.raises(ModelIntegrityError):
            store.restore_to_base(broken)
        assert store.asset_map() == before

    def test_clear(self, store):
        store.clear()
        assert len(store) == 0
        assert store.links_for_node("J1") == frozenset()
