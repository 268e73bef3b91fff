"""Entity vocabularies and write-time validation.

Every status set here is closed: a row can only be written with one of the
listed values, which keeps kanban boards from silently hiding records.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from partnership.errors import ValidationError


IDEA_STATUSES: Tuple[str, ...] = ("new", "evaluating", "approved", "archived")
IDEA_PRIORITIES: Tuple[str, ...] = ("low", "medium", "high")
PROJECT_STATUSES: Tuple[str, ...] = ("planning", "in-progress", "review", "complete")
TASK_STATUSES: Tuple[str, ...] = ("pending", "in-progress", "complete", "cancelled")

RANKING_LABELS: Dict[int, str] = {
    1: "Not happening",
    2: "Maybe later",
    3: "Under consideration",
    4: "Planned",
    5: "Actively working on",
}

STATUS_LABELS: Dict[str, str] = {
    "new": "New",
    "evaluating": "Evaluating",
    "approved": "Approved",
    "archived": "Archived",
    "planning": "Planning",
    "in-progress": "In Progress",
    "review": "Review",
    "complete": "Complete",
    "pending": "Pending",
    "cancelled": "Cancelled",
}

IDEAS = "ideas"
PROJECTS = "projects"
TASKS = "tasks"
PROJECT_HISTORY = "project_history"
COMMENTS = "comments"
TABLES: Tuple[str, ...] = (IDEAS, PROJECTS, TASKS, PROJECT_HISTORY, COMMENTS)

# Tables whose rows can never change after insert.
IMMUTABLE_TABLES = frozenset({PROJECT_HISTORY, COMMENTS})


# field -> (kind, choices); kinds are interpreted by _clean().
_FIELDS: Dict[str, Dict[str, Tuple[str, Any]]] = {
    IDEAS: {
        "title": ("required_text", None),
        "description": ("text", None),
        "status": ("enum", IDEA_STATUSES),
        "priority": ("optional_enum", IDEA_PRIORITIES),
        "ranking": ("ranking", None),
        "source": ("text", None),
        "project_id": ("ref", None),
    },
    PROJECTS: {
        "name": ("required_text", None),
        "description": ("text", None),
        "status": ("enum", PROJECT_STATUSES),
        "ranking": ("ranking", None),
        "github_url": ("text", None),
        "dashboard_url": ("text", None),
        "plan": ("text", None),
    },
    TASKS: {
        "project_id": ("required_ref", None),
        "title": ("required_text", None),
        "description": ("text", None),
        "status": ("enum", TASK_STATUSES),
        "due_date": ("datetime", None),
        "completed_at": ("datetime", None),
        "completion_notes": ("text", None),
        "scheduler_job_id": ("text", None),
    },
    PROJECT_HISTORY: {
        "project_id": ("required_ref", None),
        "entry_date": ("datetime", None),
        "summary": ("required_text", None),
        "details": ("text", None),
    },
    COMMENTS: {
        "idea_id": ("ref", None),
        "project_id": ("ref", None),
        "author": ("required_text", None),
        "content": ("required_text", None),
    },
}


def ranking_label(value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    return RANKING_LABELS.get(int(value))


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.replace("-", " ").title())


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates and ISO-8601 strings (with or without ``Z``)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        return _naive_utc(datetime.fromisoformat(raw))
    raise TypeError(f"unsupported timestamp value: {value!r}")


def _clean(kind: str, choices: Any, value: Any) -> Tuple[Any, Optional[str]]:
    if kind in ("text", "ref"):
        if value is None:
            return None, None
        text = str(value).strip()
        return (text or None), None

    if kind in ("required_text", "required_ref"):
        text = "" if value is None else str(value).strip()
        if not text:
            return None, "is required"
        return text, None

    if kind == "enum":
        if value not in choices:
            return None, f"must be one of {', '.join(choices)}"
        return value, None

    if kind == "optional_enum":
        if value is None or value == "":
            return None, None
        if value not in choices:
            return None, f"must be one of {', '.join(choices)} or empty"
        return value, None

    if kind == "ranking":
        if value is None or value == "":
            return None, None
        if isinstance(value, bool):
            return None, "must be an integer from 1 to 5"
        try:
            number = int(value)
        except (TypeError, ValueError):
            return None, "must be an integer from 1 to 5"
        if number != value and not isinstance(value, str):
            return None, "must be an integer from 1 to 5"
        if number not in RANKING_LABELS:
            return None, "must be an integer from 1 to 5"
        return number, None

    if kind == "datetime":
        try:
            return parse_timestamp(value), None
        except (TypeError, ValueError):
            return None, "is not a valid date"

    raise ValueError(f"unknown field kind {kind!r}")


def validate(table: str, fields: Mapping[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    """Clean ``fields`` for a write to ``table``.

    With ``partial=True`` (updates) only the supplied fields are checked and
    required fields may be absent, but a supplied required field may still not
    be blank. Raises :class:`ValidationError` listing every problem found.
    """
    if table not in _FIELDS:
        raise ValidationError({"table": f"unknown table {table!r}"})
    schema = _FIELDS[table]
    errors: Dict[str, str] = {}
    cleaned: Dict[str, Any] = {}

    for name in fields:
        if name not in schema:
            errors[name] = "is not a known field"

    for name, (kind, choices) in schema.items():
        if name not in fields:
            if not partial and kind in ("required_text", "required_ref"):
                errors[name] = "is required"
            continue
        value, problem = _clean(kind, choices, fields[name])
        if problem:
            errors[name] = problem
        else:
            cleaned[name] = value

    if table == COMMENTS and not partial:
        parents = [cleaned.get("idea_id"), cleaned.get("project_id")]
        if sum(1 for p in parents if p) != 1:
            errors["parent"] = "a comment belongs to exactly one idea or one project"

    if table == TASKS and "status" in cleaned and "completed_at" in cleaned:
        is_complete = cleaned["status"] == "complete"
        if is_complete != (cleaned["completed_at"] is not None):
            errors["completed_at"] = "must be set exactly when the task is complete"

    if errors:
        raise ValidationError(errors)
    return cleaned
