from __future__ import annotations

import logging
from collections import Counter, OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from partnership.domain import parse_timestamp


logger = logging.getLogger(__name__)

PARENT_FIELDS = {"idea": "idea_id", "project": "project_id"}


class CommentCounter:
    """Comment totals per parent, rebuilt from a full scan of comments.

    After the initial scan the only change is :meth:`increment`, used when a
    comment is posted to the open idea or project. Comments are never
    deleted, so there is no way down.
    """

    def __init__(self) -> None:
        self._counts: Dict[str, Counter] = {kind: Counter() for kind in PARENT_FIELDS}

    @classmethod
    def from_comments(cls, comments: Iterable[Mapping[str, Any]]) -> "CommentCounter":
        counter = cls()
        for comment in comments:
            for kind, field in PARENT_FIELDS.items():
                parent_id = comment.get(field)
                if parent_id:
                    counter._counts[kind][parent_id] += 1
                    break
        return counter

    def get(self, kind: str, parent_id: str) -> int:
        return self._counts[kind].get(parent_id, 0)

    def increment(self, kind: str, parent_id: str) -> int:
        self._counts[kind][parent_id] += 1
        return self._counts[kind][parent_id]

    def as_dict(self, kind: str) -> Dict[str, int]:
        return dict(self._counts[kind])


def kanban_columns(
    rows: Iterable[Mapping[str, Any]], statuses: Sequence[str]
) -> "OrderedDict[str, List[Mapping[str, Any]]]":
    """Group rows into one column per status, in ``statuses`` order."""
    columns: "OrderedDict[str, List[Mapping[str, Any]]]" = OrderedDict((s, []) for s in statuses)
    for row in rows:
        status = row.get("status")
        if status in columns:
            columns[status].append(row)
        else:
            logger.warning("row %s has status %r outside the board columns", row.get("id"), status)
    return columns


def status_counts(rows: Iterable[Mapping[str, Any]], statuses: Sequence[str]) -> Dict[str, int]:
    return {status: len(items) for status, items in kanban_columns(rows, statuses).items()}


def sort_history(entries: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Newest entry first."""
    return sorted(entries, key=lambda e: parse_timestamp(e.get("entry_date")) or datetime.min, reverse=True)


def records_to_df(rows: List[Mapping[str, Any]], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Table view of cached rows; date-like columns become real dates."""
    if not rows:
        return pd.DataFrame(columns=columns or [])
    df = pd.json_normalize(rows)
    if columns:
        df = df.reindex(columns=columns)
    for name in ("created_at", "updated_at", "due_date", "completed_at", "entry_date"):
        if name in df.columns:
            df[name] = pd.to_datetime(df[name], errors="coerce", utc=True).dt.date
    return df
