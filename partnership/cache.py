"""Client-side entity cache and the optimistic mutation protocol.

Pages keep one :class:`EntityCache` per collection in Streamlit session
state. Updates and deletes are applied to the cache before the store call
and rolled back to the captured snapshot if the store rejects them. Creates
are never optimistic: the row only appears once the store has assigned an
id.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from partnership.domain import validate
from partnership.errors import NotFoundError, StoreError
from partnership.models import iso, utcnow
from partnership.notifications import Notifier
from partnership.store import RecordStore


logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass(frozen=True)
class CacheSnapshot:
    rows: Tuple[Row, ...]
    selected_id: Optional[str]


class EntityCache:
    """Ordered, transient copy of one entity collection.

    The detail view is tracked by id only and always read back from the row
    list, so list and detail state cannot drift apart during a rollback.
    """

    def __init__(self, rows: Optional[List[Row]] = None, selected_id: Optional[str] = None):
        self._rows: List[Row] = [dict(r) for r in rows or []]
        self.selected_id = selected_id

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> List[Row]:
        return [dict(r) for r in self._rows]

    @property
    def ids(self) -> List[str]:
        return [r["id"] for r in self._rows]

    def _index(self, row_id: str) -> Optional[int]:
        for i, row in enumerate(self._rows):
            if row.get("id") == row_id:
                return i
        return None

    def find(self, row_id: str) -> Optional[Row]:
        i = self._index(row_id)
        return dict(self._rows[i]) if i is not None else None

    def select(self, row_id: Optional[str]) -> None:
        self.selected_id = row_id

    @property
    def selected(self) -> Optional[Row]:
        if self.selected_id is None:
            return None
        return self.find(self.selected_id)

    def snapshot(self) -> CacheSnapshot:
        return CacheSnapshot(tuple(copy.deepcopy(self._rows)), self.selected_id)

    def restore(self, snapshot: CacheSnapshot) -> None:
        self._rows = [dict(r) for r in copy.deepcopy(list(snapshot.rows))]
        self.selected_id = snapshot.selected_id

    def replace_all(self, rows: List[Row]) -> None:
        """Full refetch; keeps the selection only if the row still exists."""
        self._rows = [dict(r) for r in rows]
        if self.selected_id is not None and self._index(self.selected_id) is None:
            self.selected_id = None

    def prepend(self, row: Row) -> None:
        self._rows.insert(0, dict(row))

    def append(self, row: Row) -> None:
        self._rows.append(dict(row))

    def reconcile(self, server_row: Row) -> None:
        """Make the cached copy of ``server_row`` match the server exactly."""
        i = self._index(server_row["id"])
        if i is None:
            self.prepend(server_row)
        else:
            self._rows[i] = dict(server_row)

    def patch(self, row_id: str, changes: Mapping[str, Any]) -> Row:
        i = self._index(row_id)
        if i is None:
            raise KeyError(row_id)
        self._rows[i] = {**self._rows[i], **changes}
        return dict(self._rows[i])

    def remove(self, row_id: str) -> Optional[Row]:
        i = self._index(row_id)
        if i is None:
            return None
        return self._rows.pop(i)


def _for_display(values: Mapping[str, Any]) -> Row:
    return {k: iso(v) if isinstance(v, datetime) else v for k, v in values.items()}


class OptimisticMutator:
    """Runs create/update/delete for one table against one cache.

    ``strict`` sends the cached ``updated_at`` with every update so the store
    refuses writes based on stale rows; without it the last write wins.
    """

    def __init__(
        self,
        store: RecordStore,
        table: str,
        cache: EntityCache,
        notifier: Notifier,
        *,
        entity_label: str,
        name_field: str = "title",
        created_verb: str = "created",
        strict: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.table = table
        self.cache = cache
        self.notifier = notifier
        self.entity_label = entity_label
        self.name_field = name_field
        self.created_verb = created_verb
        self.strict = strict
        self.clock = clock

    def _describe(self, row: Optional[Row], verb: str) -> Optional[str]:
        name = (row or {}).get(self.name_field)
        return f'"{name}" has been {verb}.' if name else None

    def report_failure(self, action: str, exc: StoreError) -> None:
        """Log a failed store call and queue the error toast for it."""
        logger.warning("%s %s failed: %s", action, self.table, exc)
        self.notifier.error(f"Error {action} {self.entity_label}", str(exc))

    def create(self, fields: Mapping[str, Any], *, append: bool = False) -> Row:
        validate(self.table, fields)
        try:
            row = self.store.insert(self.table, fields)
        except StoreError as exc:
            self.report_failure("creating", exc)
            raise
        if append:
            self.cache.append(row)
        else:
            self.cache.prepend(row)
        self.notifier.success(
            f"{self.entity_label.capitalize()} {self.created_verb}",
            self._describe(row, "added"),
        )
        return row

    def update(self, row_id: str, changes: Mapping[str, Any], *, success_title: Optional[str] = None) -> Row:
        cleaned = validate(self.table, changes, partial=True)
        current = self.cache.find(row_id)
        if current is None:
            missing = NotFoundError(self.table, row_id)
            self.report_failure("updating", missing)
            raise missing

        previous = self.cache.snapshot()
        self.cache.patch(row_id, {**_for_display(cleaned), "updated_at": iso(self.clock())})

        expected = current.get("updated_at") if self.strict else None
        try:
            row = self.store.update(self.table, row_id, changes, expected_updated_at=expected)
        except StoreError as exc:
            self.cache.restore(previous)
            self.report_failure("updating", exc)
            raise

        self.cache.reconcile(row)
        self.notifier.success(
            success_title or f"{self.entity_label.capitalize()} updated",
            self._describe(row, "updated") if success_title is None else None,
        )
        return row

    def delete(self, row_id: str) -> None:
        current = self.cache.find(row_id)
        previous = self.cache.snapshot()
        self.cache.remove(row_id)
        try:
            self.store.delete(self.table, row_id)
        except StoreError as exc:
            self.cache.restore(previous)
            self.report_failure("deleting", exc)
            raise

        if self.cache.selected_id == row_id:
            self.cache.select(None)
        self.notifier.success(
            f"{self.entity_label.capitalize()} deleted",
            self._describe(current, "removed"),
        )
