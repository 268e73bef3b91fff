import streamlit as st

from partnership.aggregation import CommentCounter, kanban_columns, records_to_df
from partnership.cache import EntityCache, OptimisticMutator
from partnership.comments import session_thread
from partnership.domain import (
    COMMENTS,
    IDEA_PRIORITIES,
    IDEA_STATUSES,
    IDEAS,
    PROJECTS,
    STATUS_LABELS,
)
from partnership.theme import column_header_html
from partnership.ui import (
    card_meta,
    flush_notifications,
    form_fields,
    format_date,
    format_ranking,
    page_setup,
    ranking_options,
    render_comments,
    run_action,
    session_value,
)

config, store, notifier = page_setup("Ideas", "💡")
flush_notifications(notifier)

cache: EntityCache = session_value("ideas_cache", lambda: EntityCache(store.list(IDEAS)))
counter: CommentCounter = session_value(
    "idea_counter_cache", lambda: CommentCounter.from_comments(store.list(COMMENTS))
)
mutator = OptimisticMutator(
    store, IDEAS, cache, notifier, entity_label="idea", strict=config.strict_updates
)

projects = store.list(PROJECTS, order_by="name", descending=False)
project_names = {p["id"]: p["name"] for p in projects}
project_options = [None] + list(project_names)


def _project_label(project_id):
    return project_names.get(project_id, "No project") if project_id else "No project"


def _open(idea_id):
    cache.select(idea_id)


def _move(idea_id, key):
    if run_action(mutator.update, idea_id, {"status": st.session_state[key]}) is None:
        # Rejected: put the widget back on the restored status.
        current = cache.find(idea_id)
        if current is not None:
            st.session_state[key] = current["status"]


head_l, head_r = st.columns([4, 1])
with head_l:
    st.title("Ideas")
    st.caption("Kanban board for partnership ideas.")
with head_r:
    if st.button("↻ Refresh", help="Reload ideas and comment counts from the database"):
        cache.replace_all(store.list(IDEAS))
        st.session_state.idea_counter_cache = CommentCounter.from_comments(store.list(COMMENTS))
        st.session_state.pop("idea_thread_cache", None)
        st.rerun()

with st.expander("➕ New Idea", expanded=False):
    with st.form("new-idea-form", clear_on_submit=True):
        title = st.text_input("Title *", placeholder="Enter idea title")
        description = st.text_area("Description")
        c1, c2, c3 = st.columns(3)
        with c1:
            priority = st.selectbox("Priority", IDEA_PRIORITIES, index=1)
        with c2:
            status = st.selectbox("Status", IDEA_STATUSES, format_func=STATUS_LABELS.get)
        with c3:
            ranking = st.selectbox("Ranking", ranking_options(), index=3, format_func=format_ranking)
        source = st.text_input("Source", placeholder="e.g. daily_brief")
        project_id = st.selectbox("Project", project_options, format_func=_project_label)
        if st.form_submit_button("Create idea"):
            fields = form_fields(
                {
                    "title": title,
                    "description": description,
                    "priority": priority,
                    "status": status,
                    "ranking": ranking,
                    "source": source,
                    "project_id": project_id,
                }
            )
            if run_action(mutator.create, fields) is not None:
                st.rerun()

tab_board, tab_table = st.tabs(["Board", "Table"])

with tab_board:
    columns = kanban_columns(cache.rows, IDEA_STATUSES)
    for col, (status, ideas) in zip(st.columns(len(columns)), columns.items()):
        with col:
            st.markdown(column_header_html(status, len(ideas)), unsafe_allow_html=True)
            if not ideas:
                st.caption("No ideas")
            for idea in ideas:
                with st.container(border=True):
                    st.markdown(f"**{idea['title']}**")
                    if idea.get("description"):
                        st.caption(idea["description"][:140])
                    st.markdown(card_meta(idea, counter.get("idea", idea["id"])), unsafe_allow_html=True)
                    st.button("Open", key=f"open-idea-{idea['id']}", on_click=_open, args=(idea["id"],))

with tab_table:
    df = records_to_df(
        cache.rows,
        ["title", "status", "priority", "ranking", "source", "created_at", "updated_at"],
    )
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.download_button(
        "Export CSV",
        df.to_csv(index=False).encode("utf-8"),
        file_name="ideas.csv",
        mime="text/csv",
    )

selected = cache.selected
if selected:
    st.markdown("---")
    d_head, d_close = st.columns([5, 1])
    with d_head:
        st.subheader(selected["title"])
        st.caption(
            f"{STATUS_LABELS[selected['status']]} · {format_ranking(selected.get('ranking'))} · "
            f"{_project_label(selected.get('project_id'))} · created {format_date(selected['created_at'])}"
        )
    with d_close:
        st.button("Close", key="close-idea", on_click=_open, args=(None,))

    if selected.get("description"):
        st.write(selected["description"])

    move_key = f"move-idea-{selected['id']}"
    st.selectbox(
        "Move to",
        IDEA_STATUSES,
        index=IDEA_STATUSES.index(selected["status"]),
        format_func=STATUS_LABELS.get,
        key=move_key,
        on_change=_move,
        args=(selected["id"], move_key),
    )

    with st.expander("✏️ Edit idea"):
        with st.form(f"edit-idea-{selected['id']}"):
            e_title = st.text_input("Title *", value=selected["title"])
            e_description = st.text_area("Description", value=selected.get("description") or "")
            ec1, ec2 = st.columns(2)
            with ec1:
                e_priority = st.selectbox(
                    "Priority",
                    [None] + list(IDEA_PRIORITIES),
                    index=([None] + list(IDEA_PRIORITIES)).index(selected.get("priority")),
                    format_func=lambda p: p or "None",
                )
            with ec2:
                e_ranking = st.selectbox(
                    "Ranking",
                    ranking_options(),
                    index=ranking_options().index(selected.get("ranking")),
                    format_func=format_ranking,
                )
            e_source = st.text_input("Source", value=selected.get("source") or "")
            current_project = selected.get("project_id")
            e_project = st.selectbox(
                "Project",
                project_options,
                index=project_options.index(current_project) if current_project in project_options else 0,
                format_func=_project_label,
            )
            if st.form_submit_button("Save changes"):
                changes = form_fields(
                    {
                        "title": e_title,
                        "description": e_description,
                        "priority": e_priority,
                        "ranking": e_ranking,
                        "source": e_source,
                        "project_id": e_project,
                    }
                )
                if run_action(mutator.update, selected["id"], changes) is not None:
                    st.rerun()

    with st.expander("🗑️ Delete idea"):
        st.warning("This removes the idea and its comments.")
        if st.button("Delete", key=f"delete-idea-{selected['id']}", type="primary"):
            run_action(mutator.delete, selected["id"])
            st.rerun()

    thread = session_thread(st.session_state, "idea_thread_cache", store, "idea", selected["id"], notifier, counter)
    render_comments(thread, config.comment_authors, key=f"idea-{selected['id']}")

flush_notifications(notifier)
