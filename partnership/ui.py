"""Streamlit glue shared by the pages."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import plotly.graph_objects as go
import streamlit as st

from partnership.aggregation import status_counts
from partnership.auth import require_login
from partnership.comments import CommentThread
from partnership.config import DashboardConfig, configure_logging
from partnership.domain import RANKING_LABELS, STATUS_LABELS, parse_timestamp, ranking_label
from partnership.errors import InvalidTransitionError, StoreError, ValidationError
from partnership.notifications import Notifier
from partnership.seed import bootstrap
from partnership.store import RecordStore, get_store
from partnership.theme import STATUS_COLORS, set_theme


logger = logging.getLogger(__name__)


def page_setup(title: str, icon: str = "🤝") -> Tuple[DashboardConfig, RecordStore, Notifier]:
    """Common start of every page: theme, logging, login gate, store."""
    set_theme(page_title=title, page_icon=icon)
    config = DashboardConfig.from_env()
    configure_logging(config.log_level)
    require_login(config)

    store = get_store(config.database_url)
    if not st.session_state.get("bootstrapped"):
        bootstrap(store, config)
        st.session_state.bootstrapped = True

    if "notifier" not in st.session_state:
        st.session_state.notifier = Notifier()
    return config, store, st.session_state.notifier


def flush_notifications(notifier: Notifier) -> None:
    for note in notifier.drain():
        text = f"**{note.title}**" + (f": {note.description}" if note.description else "")
        st.toast(text, icon="⚠️" if note.is_error else "✅")


def run_action(action, *args, **kwargs) -> Optional[Any]:
    """Run a mutation triggered by a widget.

    Validation problems and refused status moves are shown inline. Store
    failures were already rolled back and queued as error toasts by the cache
    layer, so they are only logged here.
    """
    try:
        return action(*args, **kwargs)
    except ValidationError as exc:
        for field, message in exc.errors.items():
            st.error(f"{field.replace('_', ' ').capitalize()} {message}")
    except InvalidTransitionError as exc:
        st.error(str(exc))
    except StoreError as exc:
        logger.debug("store failure already notified: %s", exc)
    return None


def format_date(value: Any) -> str:
    stamp = parse_timestamp(value)
    return stamp.strftime("%Y-%m-%d") if stamp else "-"


def ranking_options() -> List[Optional[int]]:
    return [None] + sorted(RANKING_LABELS)


def format_ranking(value: Optional[int]) -> str:
    return f"{value} · {ranking_label(value)}" if value else "Unranked"


def status_chart(rows: Sequence[Mapping[str, Any]], statuses: Sequence[str], title: str = "") -> go.Figure:
    counts = status_counts(rows, statuses)
    fig = go.Figure()
    fig.add_bar(
        x=[STATUS_LABELS.get(s, s) for s in counts],
        y=list(counts.values()),
        marker_color=[STATUS_COLORS.get(s, "#888") for s in counts],
    )
    fig.update_layout(
        title=title or None,
        template="plotly_white",
        margin=dict(l=6, r=6, t=30, b=10),
        height=280,
        showlegend=False,
    )
    return fig


def card_meta(row: Mapping[str, Any], comment_count: int) -> str:
    parts = []
    if row.get("priority"):
        parts.append(f"<span class='pd-badge pd-priority-{row['priority']}'>{row['priority']}</span>")
    if row.get("ranking"):
        parts.append(f"⭐ {row['ranking']}")
    parts.append(f"💬 {comment_count}")
    parts.append(f"🕒 {format_date(row.get('created_at'))}")
    return "<div class='pd-card-meta'>" + " • ".join(parts) + "</div>"


def render_comments(thread: CommentThread, authors: Sequence[str], key: str) -> None:
    comments = thread.comments
    st.markdown(f"**💬 Comments ({len(comments)})**")
    if not comments:
        st.caption("No comments yet. Start the conversation.")
    for comment in comments:
        st.markdown(
            f"<div class='pd-card-meta'><b>{comment['author']}</b> · {format_date(comment['created_at'])}</div>",
            unsafe_allow_html=True,
        )
        st.write(comment["content"])

    with st.form(f"comment-form-{key}", clear_on_submit=True):
        c1, c2 = st.columns([1, 3])
        with c1:
            author = st.selectbox("Author", options=list(authors), key=f"comment-author-{key}")
        with c2:
            content = st.text_input("Comment", placeholder="Add a comment…", key=f"comment-text-{key}")
        submitted = st.form_submit_button("Send")
    if submitted and content.strip():
        if run_action(thread.add, author, content) is not None:
            st.rerun()


def session_value(key: str, factory) -> Any:
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


def form_fields(values: Dict[str, Any]) -> Dict[str, Any]:
    """Blank optional text inputs become None before they reach the store."""
    return {k: (v.strip() or None) if isinstance(v, str) else v for k, v in values.items()}
