import pytest

from partnership.aggregation import CommentCounter
from partnership.comments import CommentThread, session_thread
from partnership.errors import ValidationError


def test_thread_is_oldest_first_and_scoped(store, idea, project, notifier):
    store.insert("comments", {"idea_id": idea["id"], "author": "Richard", "content": "first"})
    store.insert("comments", {"project_id": project["id"], "author": "Shaka", "content": "elsewhere"})
    thread = CommentThread(store, "idea", idea["id"], notifier)
    thread.add("Shaka", "second")
    assert [c["content"] for c in thread.comments] == ["first", "second"]


def test_add_sets_only_one_parent(store, project, notifier):
    thread = CommentThread(store, "project", project["id"], notifier)
    row = thread.add("Richard", "looks good")
    assert row["project_id"] == project["id"]
    assert row["idea_id"] is None
    assert notifier.history[-1].title == "Comment added"


def test_add_bumps_the_shared_counter(store, idea, notifier):
    counter = CommentCounter.from_comments(store.list("comments"))
    thread = CommentThread(store, "idea", idea["id"], notifier, counter)
    thread.add("Richard", "a")
    thread.add("Shaka", "b")
    assert counter.get("idea", idea["id"]) == 2


def test_blank_comment_is_rejected(store, idea, notifier):
    counter = CommentCounter()
    thread = CommentThread(store, "idea", idea["id"], notifier, counter)
    with pytest.raises(ValidationError):
        thread.add("Richard", "   ")
    assert counter.get("idea", idea["id"]) == 0
    assert store.count("comments") == 0


def test_unknown_parent_kind(store, notifier):
    with pytest.raises(ValueError):
        CommentThread(store, "task", "t1", notifier)


def test_session_thread_reuses_thread_for_same_parent(store, project, notifier):
    session = {}
    first = session_thread(session, "project_thread_cache", store, "project", project["id"], notifier, None)
    again = session_thread(session, "project_thread_cache", store, "project", project["id"], notifier, None)
    assert again is first

    other = store.insert("projects", {"name": "P2", "status": "planning"})
    switched = session_thread(session, "project_thread_cache", store, "project", other["id"], notifier, None)
    assert switched is not first
    assert session["project_thread_cache"] is switched


def test_comment_after_counter_rebuild_bumps_the_new_counter(store, project, notifier):
    session = {}
    stale = CommentCounter.from_comments(store.list("comments"))
    session_thread(session, "project_thread_cache", store, "project", project["id"], notifier, stale)

    # Board refresh rebuilds the counter; the next page run re-attaches it.
    fresh = CommentCounter.from_comments(store.list("comments"))
    thread = session_thread(session, "project_thread_cache", store, "project", project["id"], notifier, fresh)
    thread.add("Richard", "after refresh")

    assert fresh.get("project", project["id"]) == 1
    assert stale.get("project", project["id"]) == 0


def test_thread_opened_before_counter_exists_still_counts(store, project, notifier):
    session = {}
    session_thread(session, "project_thread_cache", store, "project", project["id"], notifier, None)

    counter = CommentCounter.from_comments(store.list("comments"))
    thread = session_thread(session, "project_thread_cache", store, "project", project["id"], notifier, counter)
    thread.add("Shaka", "first")

    assert counter.get("project", project["id"]) == 1
