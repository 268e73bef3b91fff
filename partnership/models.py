from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

from partnership.domain import (
    COMMENTS,
    IDEA_PRIORITIES,
    IDEA_STATUSES,
    IDEAS,
    PROJECT_HISTORY,
    PROJECT_STATUSES,
    PROJECTS,
    TASK_STATUSES,
    TASKS,
)


Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid.uuid4())


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() + "Z" if value else None


def _in(column: str, values: Iterable[str]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


_RANKING_CHECK = "ranking IS NULL OR (ranking >= 1 AND ranking <= 5)"


class RowMixin:
    """Plain-dict view of a row; timestamps become ISO strings with ``Z``."""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for column in self.__table__.columns:  # type: ignore[attr-defined]
            value = getattr(self, column.name)
            out[column.name] = iso(value) if isinstance(value, datetime) else value
        return out


class Idea(RowMixin, Base):
    __tablename__ = IDEAS

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="new", index=True)
    priority = Column(String(16), nullable=True)
    ranking = Column(Integer, nullable=True)
    source = Column(String(128), nullable=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(_in("status", IDEA_STATUSES), name="ck_ideas_status"),
        CheckConstraint("priority IS NULL OR " + _in("priority", IDEA_PRIORITIES), name="ck_ideas_priority"),
        CheckConstraint(_RANKING_CHECK, name="ck_ideas_ranking"),
    )


class Project(RowMixin, Base):
    __tablename__ = PROJECTS

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="planning", index=True)
    ranking = Column(Integer, nullable=True)
    github_url = Column(String(1024), nullable=True)
    dashboard_url = Column(String(1024), nullable=True)
    plan = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(_in("status", PROJECT_STATUSES), name="ck_projects_status"),
        CheckConstraint(_RANKING_CHECK, name="ck_projects_ranking"),
    )


class Task(RowMixin, Base):
    __tablename__ = TASKS

    id = Column(String(36), primary_key=True, default=_new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    due_date = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    completion_notes = Column(Text, nullable=True)
    scheduler_job_id = Column(String(128), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(_in("status", TASK_STATUSES), name="ck_tasks_status"),
        CheckConstraint(
            "(status = 'complete' AND completed_at IS NOT NULL) OR "
            "(status <> 'complete' AND completed_at IS NULL)",
            name="ck_tasks_completed_at",
        ),
    )


class ProjectHistory(RowMixin, Base):
    __tablename__ = PROJECT_HISTORY

    id = Column(String(36), primary_key=True, default=_new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_date = Column(DateTime, default=utcnow, nullable=False)
    summary = Column(Text, nullable=False)
    details = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)


class Comment(RowMixin, Base):
    __tablename__ = COMMENTS

    id = Column(String(36), primary_key=True, default=_new_id)
    idea_id = Column(String(36), ForeignKey("ideas.id", ondelete="CASCADE"), nullable=True, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    author = Column(String(128), nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(idea_id IS NULL AND project_id IS NOT NULL) OR "
            "(idea_id IS NOT NULL AND project_id IS NULL)",
            name="ck_comments_single_parent",
        ),
    )


MODELS = {
    IDEAS: Idea,
    PROJECTS: Project,
    TASKS: Task,
    PROJECT_HISTORY: ProjectHistory,
    COMMENTS: Comment,
}
