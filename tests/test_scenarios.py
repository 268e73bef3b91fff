"""End-to-end flows through the same objects the pages use."""
import pytest

from partnership.aggregation import CommentCounter
from partnership.cache import EntityCache, OptimisticMutator
from partnership.comments import CommentThread
from partnership.errors import StoreError
from partnership.models import iso
from partnership.tasks import TaskController

from conftest import FIXED_NOW


def test_task_toggle_round_trip(store, notifier, clock):
    project = store.insert("projects", {"name": "P1", "status": "planning"})
    tasks = TaskController(store, project["id"], EntityCache(), notifier, clock=clock)
    task = tasks.create({"title": "T1"})

    tasks.toggle_complete(task["id"])
    stored = store.get("tasks", task["id"])
    assert stored["status"] == "complete"
    assert stored["completed_at"] == iso(FIXED_NOW)

    tasks.toggle_complete(task["id"])
    stored = store.get("tasks", task["id"])
    assert stored["status"] == "pending"
    assert stored["completed_at"] is None
    assert notifier.errors == []


def test_comment_counts_per_parent(store, notifier):
    idea = store.insert("ideas", {"title": "I1", "status": "new"})
    project = store.insert("projects", {"name": "P1", "status": "planning"})
    counter = CommentCounter.from_comments(store.list("comments"))
    thread = CommentThread(store, "idea", idea["id"], notifier, counter)
    for text in ("one", "two", "three"):
        thread.add("Richard", text)

    assert counter.get("idea", idea["id"]) == 3
    assert counter.get("project", project["id"]) == 0

    rebuilt = CommentCounter.from_comments(store.list("comments"))
    assert rebuilt.as_dict("idea") == {idea["id"]: 3}
    assert rebuilt.as_dict("project") == {}


def test_rejected_status_move_reverts_board_and_detail(store, notifier, monkeypatch):
    idea = store.insert("ideas", {"title": "I1", "status": "new"})
    cache = EntityCache(store.list("ideas"), selected_id=idea["id"])
    mutator = OptimisticMutator(store, "ideas", cache, notifier, entity_label="idea")

    def reject(*args, **kwargs):
        raise StoreError("permission denied")

    monkeypatch.setattr(store, "update", reject)
    with pytest.raises(StoreError):
        mutator.update(idea["id"], {"status": "approved"})

    assert cache.find(idea["id"])["status"] == "new"
    assert cache.selected["status"] == "new"
    assert store.get("ideas", idea["id"])["status"] == "new"
    assert len(notifier.errors) == 1
    assert notifier.errors[0].title == "Error updating idea"


def test_deleting_a_project_leaves_ideas_unlinked(store, notifier):
    project = store.insert("projects", {"name": "P1", "status": "in-progress"})
    idea = store.insert("ideas", {"title": "I1", "status": "approved", "project_id": project["id"]})
    projects = EntityCache(store.list("projects"), selected_id=project["id"])
    mutator = OptimisticMutator(store, "projects", projects, notifier, entity_label="project", name_field="name")

    mutator.delete(project["id"])

    assert projects.selected is None
    assert store.get("ideas", idea["id"])["project_id"] is None
    assert notifier.history[-1].description == '"P1" has been removed.'
