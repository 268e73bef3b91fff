"""Task lifecycle: status transitions, completion timestamps and ordering.

Any status may follow any other under the default policy. The only
state-dependent rule is the completion timestamp: entering ``complete`` stamps
``completed_at``, leaving it clears the stamp.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional

from partnership.cache import EntityCache, OptimisticMutator
from partnership.domain import TASK_STATUSES, TASKS, parse_timestamp
from partnership.errors import InvalidTransitionError, NotFoundError
from partnership.models import utcnow
from partnership.notifications import Notifier
from partnership.store import RecordStore


logger = logging.getLogger(__name__)

COMPLETE = "complete"
PENDING = "pending"

STATUS_ORDER: Dict[str, int] = {
    "in-progress": 0,
    "pending": 1,
    "complete": 2,
    "cancelled": 3,
}
_UNKNOWN_RANK = 99

FINISHED_STATUSES = frozenset({"complete", "cancelled"})

STRICT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"in-progress", "complete", "cancelled"}),
    "in-progress": frozenset({"pending", "complete", "cancelled"}),
    "complete": frozenset({"pending", "in-progress"}),
    "cancelled": frozenset({"pending"}),
}


class TransitionPolicy:
    """Decides which status changes the edit form may make.

    ``allowed=None`` is the permissive policy: every status is reachable from
    every other.
    """

    def __init__(self, allowed: Optional[Mapping[str, FrozenSet[str]]] = None):
        self.allowed = dict(allowed) if allowed is not None else None

    @classmethod
    def named(cls, name: str) -> "TransitionPolicy":
        if name == "strict":
            return cls(STRICT_TRANSITIONS)
        return cls()

    @property
    def is_permissive(self) -> bool:
        return self.allowed is None

    def can_move(self, current: str, target: str) -> bool:
        if target not in TASK_STATUSES:
            return False
        if current == target or self.allowed is None:
            return True
        return target in self.allowed.get(current, frozenset())

    def check(self, current: str, target: str) -> None:
        if not self.can_move(current, target):
            raise InvalidTransitionError(current, target)

    def targets(self, current: str) -> List[str]:
        return [s for s in TASK_STATUSES if self.can_move(current, s)]


def status_changes(task: Mapping[str, Any], new_status: str, now: datetime) -> Dict[str, Any]:
    """Fields to write when ``task`` moves to ``new_status``."""
    changes: Dict[str, Any] = {"status": new_status}
    if new_status == COMPLETE:
        if task.get("status") != COMPLETE or not task.get("completed_at"):
            changes["completed_at"] = now
        else:
            changes["completed_at"] = task["completed_at"]
    else:
        changes["completed_at"] = None
    return changes


def toggle_target(task: Mapping[str, Any]) -> str:
    return PENDING if task.get("status") == COMPLETE else COMPLETE


def sort_tasks(tasks: List[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """in-progress, pending, complete, cancelled; ties keep their order."""
    return sorted(tasks, key=lambda t: STATUS_ORDER.get(t.get("status"), _UNKNOWN_RANK))


def show_completion_notes(task: Mapping[str, Any]) -> bool:
    return task.get("status") in FINISHED_STATUSES and bool(task.get("completion_notes"))


def is_overdue(task: Mapping[str, Any], today: Optional[date] = None) -> bool:
    if task.get("status") in FINISHED_STATUSES:
        return False
    due = parse_timestamp(task.get("due_date"))
    if due is None:
        return False
    return due.date() < (today or date.today())


class TaskController:
    """Task mutations for one project, routed through the optimistic protocol."""

    def __init__(
        self,
        store: RecordStore,
        project_id: str,
        cache: EntityCache,
        notifier: Notifier,
        *,
        policy: Optional[TransitionPolicy] = None,
        strict: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.project_id = project_id
        self.cache = cache
        self.policy = policy or TransitionPolicy()
        self.clock = clock
        self.mutator = OptimisticMutator(
            store,
            TASKS,
            cache,
            notifier,
            entity_label="task",
            strict=strict,
            clock=clock,
        )

    def _current(self, task_id: str) -> Dict[str, Any]:
        task = self.cache.find(task_id)
        if task is None:
            missing = NotFoundError(TASKS, task_id)
            self.mutator.report_failure("updating", missing)
            raise missing
        return task

    @property
    def ordered(self) -> List[Mapping[str, Any]]:
        return sort_tasks(self.cache.rows)

    def create(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        data = dict(fields)
        data["project_id"] = self.project_id
        data.setdefault("status", PENDING)
        data["completed_at"] = self.clock() if data["status"] == COMPLETE else None
        return self.mutator.create(data, append=True)

    def edit(self, task_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """General form edit; any field, including status."""
        task = self._current(task_id)
        changes = {k: v for k, v in fields.items() if k not in ("completed_at", "project_id")}
        target = changes.get("status", task.get("status"))
        self.policy.check(task.get("status"), target)
        changes.update(status_changes(task, target, self.clock()))
        return self.mutator.update(task_id, changes)

    def toggle_complete(self, task_id: str) -> Dict[str, Any]:
        """Flip between pending and complete, bypassing the transition policy."""
        task = self._current(task_id)
        target = toggle_target(task)
        title = "Task completed" if target == COMPLETE else "Task reopened"
        logger.debug("toggling task %s to %s", task_id, target)
        return self.mutator.update(task_id, status_changes(task, target, self.clock()), success_title=title)

    def delete(self, task_id: str) -> None:
        self.mutator.delete(task_id)
