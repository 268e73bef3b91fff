from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from partnership.config_utils import (
    env_bool,
    env_choice,
    env_list,
    env_optional_str,
    env_str,
)


TRANSITION_POLICIES = ("permissive", "strict")
DEFAULT_COMMENT_AUTHORS = ["Richard", "Shaka"]
DEFAULT_AUTH_SECRET = "default-secret"


def _default_database_url() -> str:
    # Local sqlite file under repo-root data/.
    repo_root = Path(__file__).resolve().parents[1]
    data_dir = repo_root / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(data_dir / 'dashboard.db').as_posix()}"


@dataclass(frozen=True)
class DashboardConfig:
    """Runtime configuration for the partnership dashboard.

    DB selection:
    - DASHBOARD_DATABASE_URL: dashboard-specific DB URL (preferred)
    - DATABASE_URL: shared DB URL
    - If neither is set, defaults to local SQLite at data/dashboard.db

    Access:
    - APP_PASSWORD: password for the login gate; unset leaves the gate open
    - AUTH_SECRET: mixed into the session token (default: default-secret)

    Behaviour:
    - DASHBOARD_STRICT_UPDATES: send last-known updated_at with every update
      and refuse stale writes (default: false, last write wins)
    - TASK_TRANSITION_POLICY: permissive|strict (default: permissive)
    - DASHBOARD_SEED_SAMPLE_DATA: seed demo rows into an empty local DB
    - COMMENT_AUTHORS: comma separated author names offered on comment forms
    - DASHBOARD_LOG_LEVEL: logging level name (default: INFO)
    """

    database_url: str
    app_password: Optional[str] = None
    auth_secret: str = DEFAULT_AUTH_SECRET
    strict_updates: bool = False
    task_transition_policy: str = "permissive"
    seed_sample_data: bool = True
    comment_authors: List[str] = field(default_factory=lambda: list(DEFAULT_COMMENT_AUTHORS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        db_url = env_optional_str("DASHBOARD_DATABASE_URL") or env_optional_str("DATABASE_URL")
        if not db_url:
            db_url = _default_database_url()

        return cls(
            database_url=db_url,
            app_password=env_optional_str("APP_PASSWORD"),
            auth_secret=env_optional_str("AUTH_SECRET") or DEFAULT_AUTH_SECRET,
            strict_updates=env_bool("DASHBOARD_STRICT_UPDATES", False),
            task_transition_policy=env_choice("TASK_TRANSITION_POLICY", "permissive", TRANSITION_POLICIES),
            seed_sample_data=env_bool("DASHBOARD_SEED_SAMPLE_DATA", True),
            comment_authors=env_list("COMMENT_AUTHORS", DEFAULT_COMMENT_AUTHORS),
            log_level=env_str("DASHBOARD_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def is_local_sqlite(self) -> bool:
        url = self.database_url.replace("\\", "/")
        return url.startswith("sqlite:///") and url.endswith("/data/dashboard.db")


_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Streamlit re-executes page scripts on every interaction, so this must be
    safe to call repeatedly.
    """
    logger = logging.getLogger("partnership")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not any(getattr(h, "_partnership", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._partnership = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
