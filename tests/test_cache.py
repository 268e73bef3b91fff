import pytest

from partnership.cache import EntityCache, OptimisticMutator
from partnership.errors import ConflictError, NotFoundError, StoreError, ValidationError


def _rows():
    return [
        {"id": "a", "title": "A", "status": "new", "updated_at": "2026-01-01T00:00:00Z"},
        {"id": "b", "title": "B", "status": "approved", "updated_at": "2026-01-02T00:00:00Z"},
    ]


def test_rows_are_copies():
    cache = EntityCache(_rows())
    cache.rows[0]["title"] = "changed"
    assert cache.find("a")["title"] == "A"


def test_selected_follows_the_row_list():
    cache = EntityCache(_rows(), selected_id="b")
    cache.patch("b", {"status": "archived"})
    assert cache.selected["status"] == "archived"


def test_snapshot_restore_is_exact():
    cache = EntityCache(_rows(), selected_id="a")
    snap = cache.snapshot()
    cache.patch("a", {"title": "X"})
    cache.remove("b")
    cache.select(None)
    cache.restore(snap)
    assert cache.rows == _rows()
    assert cache.selected_id == "a"


def test_replace_all_drops_stale_selection():
    cache = EntityCache(_rows(), selected_id="b")
    cache.replace_all([_rows()[0]])
    assert cache.selected_id is None


def test_reconcile_replaces_in_place_or_prepends():
    cache = EntityCache(_rows())
    cache.reconcile({"id": "b", "title": "B2", "status": "approved"})
    assert cache.ids == ["a", "b"]
    assert cache.find("b")["title"] == "B2"
    cache.reconcile({"id": "c", "title": "C", "status": "new"})
    assert cache.ids == ["c", "a", "b"]


def test_patch_unknown_row():
    with pytest.raises(KeyError):
        EntityCache().patch("zzz", {})


@pytest.fixture
def ideas(store, notifier, clock):
    cache = EntityCache(store.list("ideas"))
    return OptimisticMutator(store, "ideas", cache, notifier, entity_label="idea", clock=clock)


def test_create_is_not_optimistic(ideas, notifier, monkeypatch):
    def refuse(table, fields):
        assert ideas.cache.rows == []
        raise StoreError("disk full")

    monkeypatch.setattr(ideas.store, "insert", refuse)
    with pytest.raises(StoreError):
        ideas.create({"title": "Never", "status": "new"})
    assert ideas.cache.rows == []
    assert notifier.errors[-1].title == "Error creating idea"


def test_create_prepends_server_row(ideas, notifier):
    first = ideas.create({"title": "One", "status": "new"})
    second = ideas.create({"title": "Two", "status": "new"})
    assert ideas.cache.ids == [second["id"], first["id"]]
    note = notifier.history[-1]
    assert note.title == "Idea created"
    assert note.description == '"Two" has been added.'


def test_create_rejects_invalid_fields_without_store_call(ideas, monkeypatch):
    monkeypatch.setattr(ideas.store, "insert", lambda *a, **k: pytest.fail("store called"))
    with pytest.raises(ValidationError):
        ideas.create({"title": "", "status": "new"})


def test_update_applies_then_reconciles(ideas, notifier, store):
    row = ideas.create({"title": "Idea", "status": "new"})
    ideas.cache.select(row["id"])

    updated = ideas.update(row["id"], {"status": "evaluating"})

    assert ideas.cache.find(row["id"]) == updated == store.get("ideas", row["id"])
    assert ideas.cache.selected["status"] == "evaluating"
    assert notifier.history[-1].title == "Idea updated"


def test_update_failure_rolls_back_list_and_detail(ideas, notifier, monkeypatch):
    row = ideas.create({"title": "Idea", "status": "new"})
    ideas.cache.select(row["id"])
    before = ideas.cache.snapshot()
    seen = {}

    def boom(table, row_id, changes, expected_updated_at=None):
        seen["optimistic"] = ideas.cache.selected["status"]
        raise StoreError("connection lost")

    monkeypatch.setattr(ideas.store, "update", boom)
    with pytest.raises(StoreError):
        ideas.update(row["id"], {"status": "approved"})

    assert seen["optimistic"] == "approved"
    assert ideas.cache.snapshot() == before
    assert ideas.cache.selected["status"] == "new"
    assert notifier.errors[-1].title == "Error updating idea"
    assert notifier.errors[-1].description == "connection lost"


def test_update_of_uncached_row(ideas):
    with pytest.raises(NotFoundError):
        ideas.update("missing", {"status": "approved"})


def test_strict_update_sends_token_and_rolls_back_on_conflict(store, notifier):
    cache = EntityCache()
    mutator = OptimisticMutator(store, "ideas", cache, notifier, entity_label="idea", strict=True)
    row = mutator.create({"title": "Shared", "status": "new"})

    # Someone else edits the row behind this cache's back.
    store.update("ideas", row["id"], {"title": "Their edit"})

    with pytest.raises(ConflictError):
        mutator.update(row["id"], {"title": "My edit"})
    assert cache.find(row["id"])["title"] == "Shared"
    assert store.get("ideas", row["id"])["title"] == "Their edit"


def test_last_write_wins_without_strict(store, ideas):
    row = ideas.create({"title": "Shared", "status": "new"})
    store.update("ideas", row["id"], {"title": "Their edit"})
    assert ideas.update(row["id"], {"title": "My edit"})["title"] == "My edit"


def test_delete_success_clears_selection(ideas, notifier, store):
    row = ideas.create({"title": "Gone", "status": "new"})
    ideas.cache.select(row["id"])
    ideas.delete(row["id"])
    assert ideas.cache.rows == []
    assert ideas.cache.selected is None
    assert store.get("ideas", row["id"]) is None
    assert notifier.history[-1].title == "Idea deleted"


def test_delete_failure_restores_row_and_selection(ideas, notifier, monkeypatch):
    row = ideas.create({"title": "Stays", "status": "new"})
    ideas.cache.select(row["id"])

    def boom(table, row_id):
        assert ideas.cache.find(row_id) is None
        raise StoreError("locked")

    monkeypatch.setattr(ideas.store, "delete", boom)
    with pytest.raises(StoreError):
        ideas.delete(row["id"])
    assert ideas.cache.selected["title"] == "Stays"
    assert notifier.errors[-1].title == "Error deleting idea"


def test_update_of_uncached_row_queues_error_toast(ideas, notifier):
    with pytest.raises(NotFoundError):
        ideas.update("missing", {"status": "approved"})
    assert notifier.errors[-1].title == "Error updating idea"
