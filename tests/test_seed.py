from partnership.config import DashboardConfig
from partnership.seed import SAMPLE_IDEAS, SAMPLE_PROJECTS, bootstrap, seed_sample_data


def test_seed_inserts_sample_rows(store):
    counts = seed_sample_data(store)
    assert counts == {"projects": len(SAMPLE_PROJECTS), "ideas": len(SAMPLE_IDEAS)}
    ideas = store.list("ideas")
    assert {i["status"] for i in ideas} == {"new"}
    assert {i["source"] for i in ideas} == {"daily_brief"}


def test_reset_replaces_existing_rows(store, project):
    store.insert("tasks", {"project_id": project["id"], "title": "t", "status": "pending"})
    seed_sample_data(store, reset=True)
    assert store.count("projects") == len(SAMPLE_PROJECTS)
    assert store.count("tasks") == 0


def test_bootstrap_only_seeds_the_local_default_db(store):
    remote = DashboardConfig(database_url=store.database_url)
    assert not remote.is_local_sqlite
    assert bootstrap(store, remote) is False
    assert store.count("projects") == 0


def test_bootstrap_respects_flag_and_existing_rows(store, monkeypatch):
    monkeypatch.setattr(DashboardConfig, "is_local_sqlite", property(lambda self: True))
    assert bootstrap(store, DashboardConfig(database_url=store.database_url, seed_sample_data=False)) is False

    config = DashboardConfig(database_url=store.database_url)
    assert bootstrap(store, config) is True
    assert store.count("ideas") == len(SAMPLE_IDEAS)
    assert bootstrap(store, config) is False
    assert store.count("ideas") == len(SAMPLE_IDEAS)
