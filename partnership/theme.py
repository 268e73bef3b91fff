import streamlit as st
from streamlit.errors import StreamlitAPIException

from partnership.domain import STATUS_LABELS

# Column header colours per status, shared by both boards and the task list.
STATUS_COLORS = {
    "new": "#3b82f6",
    "evaluating": "#eab308",
    "approved": "#22c55e",
    "archived": "#6b7280",
    "planning": "#3b82f6",
    "in-progress": "#eab308",
    "review": "#a855f7",
    "complete": "#22c55e",
    "pending": "#94a3b8",
    "cancelled": "#9ca3af",
}

PRIORITY_COLORS = {"low": "#22c55e", "medium": "#3b82f6", "high": "#ef4444"}

_BASE_CSS = """
.pd-col-header { display:flex; align-items:center; gap:.45rem; font-weight:700; font-size:.95rem; margin-bottom:.5rem; }
.pd-dot { width:.55rem; height:.55rem; border-radius:50%; display:inline-block; }
.pd-card-meta { color:#6b7b8f; font-size:.8rem; }
.pd-badge { display:inline-block; font-size:.68rem; font-weight:700; border-radius:30px; padding:.12rem .55rem; color:#fff; text-transform:uppercase; letter-spacing:.5px; }
.pd-overdue { color:#b71c1c; font-weight:600; }
.pd-muted { color:#94a3b8; }
"""


def status_css(colors=None) -> str:
    """CSS classes ``pd-status-<status>`` and ``pd-priority-<priority>``."""
    colors = colors or STATUS_COLORS
    rules = [f".pd-status-{status} {{ background:{color}; }}" for status, color in colors.items()]
    rules += [f".pd-priority-{p} {{ background:{c}; }}" for p, c in PRIORITY_COLORS.items()]
    return "\n".join(rules)


def column_header_html(status: str, count: int) -> str:
    color = STATUS_COLORS.get(status, "#6b7280")
    label = STATUS_LABELS.get(status, status)
    return (
        f"<div class='pd-col-header'><span class='pd-dot' style='background:{color}'></span>"
        f"{label} <span class='pd-muted'>({count})</span></div>"
    )


def set_theme(
    page_title: str = "Partnership Dashboard",
    page_icon: str = "🤝",
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure the Streamlit page and inject the board CSS.

    Safe to call once at top of each page. Subsequent calls will be ignored by
    Streamlit for page_config but CSS will still be (re)injected.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except StreamlitAPIException:
        # set_page_config can only be called once per run.
        pass
    st.markdown(f"<style>{_BASE_CSS}\n{status_css()}</style>", unsafe_allow_html=True)
