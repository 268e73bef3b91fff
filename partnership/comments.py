from __future__ import annotations

from typing import Any, Dict, MutableMapping, Optional

from partnership.aggregation import PARENT_FIELDS, CommentCounter
from partnership.cache import EntityCache, OptimisticMutator
from partnership.domain import COMMENTS
from partnership.notifications import Notifier
from partnership.store import RecordStore


class CommentThread:
    """Comments of the currently open idea or project, oldest first.

    Posting a comment appends it to the thread and bumps the shared counter
    for the open parent by one.
    """

    def __init__(
        self,
        store: RecordStore,
        kind: str,
        parent_id: str,
        notifier: Notifier,
        counter: Optional[CommentCounter] = None,
    ):
        if kind not in PARENT_FIELDS:
            raise ValueError(f"comments attach to {' or '.join(PARENT_FIELDS)}, not {kind!r}")
        self.kind = kind
        self.parent_id = parent_id
        self.counter = counter
        self.cache = EntityCache(
            store.list(COMMENTS, {PARENT_FIELDS[kind]: parent_id}, descending=False)
        )
        self.mutator = OptimisticMutator(
            store,
            COMMENTS,
            self.cache,
            notifier,
            entity_label="comment",
            name_field="content",
            created_verb="added",
        )

    @property
    def comments(self):
        return self.cache.rows

    def add(self, author: str, content: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"author": author, "content": content}
        for kind, field in PARENT_FIELDS.items():
            fields[field] = self.parent_id if kind == self.kind else None
        row = self.mutator.create(fields, append=True)
        if self.counter is not None:
            self.counter.increment(self.kind, self.parent_id)
        return row


def session_thread(
    session_state: MutableMapping[str, Any],
    key: str,
    store: RecordStore,
    kind: str,
    parent_id: str,
    notifier: Notifier,
    counter: Optional[CommentCounter],
) -> CommentThread:
    """Thread for ``parent_id`` kept under ``key``, rebuilt when the parent changes.

    The counter is re-attached on every call so comments always bump the
    board's current counter, even after it was rebuilt by a refresh.
    """
    thread = session_state.get(key)
    if thread is None or thread.kind != kind or thread.parent_id != parent_id:
        thread = CommentThread(store, kind, parent_id, notifier, counter)
        session_state[key] = thread
    thread.counter = counter
    return thread
