import streamlit as st

from partnership.aggregation import CommentCounter, kanban_columns, records_to_df
from partnership.cache import EntityCache, OptimisticMutator
from partnership.domain import COMMENTS, PROJECT_STATUSES, PROJECTS, STATUS_LABELS
from partnership.theme import column_header_html
from partnership.ui import (
    card_meta,
    flush_notifications,
    form_fields,
    format_ranking,
    page_setup,
    ranking_options,
    run_action,
    session_value,
    status_chart,
)

config, store, notifier = page_setup("Projects", "🛠️")
flush_notifications(notifier)

cache: EntityCache = session_value("projects_cache", lambda: EntityCache(store.list(PROJECTS)))
counter: CommentCounter = session_value(
    "project_counter_cache", lambda: CommentCounter.from_comments(store.list(COMMENTS))
)
mutator = OptimisticMutator(
    store,
    PROJECTS,
    cache,
    notifier,
    entity_label="project",
    name_field="name",
    strict=config.strict_updates,
)


def _open_detail(project_id):
    st.session_state.project_id = project_id


head_l, head_r = st.columns([4, 1])
with head_l:
    st.title("Projects")
    st.caption("Track partnership projects from planning to completion.")
with head_r:
    if st.button("↻ Refresh", help="Reload projects and comment counts from the database"):
        cache.replace_all(store.list(PROJECTS))
        st.session_state.project_counter_cache = CommentCounter.from_comments(store.list(COMMENTS))
        st.session_state.pop("project_thread_cache", None)
        st.rerun()

with st.expander("➕ New Project", expanded=False):
    with st.form("new-project-form", clear_on_submit=True):
        name = st.text_input("Name *", placeholder="Enter project name")
        description = st.text_area("Description")
        c1, c2 = st.columns(2)
        with c1:
            status = st.selectbox("Status", PROJECT_STATUSES, format_func=STATUS_LABELS.get)
        with c2:
            ranking = st.selectbox("Ranking", ranking_options(), index=3, format_func=format_ranking)
        github_url = st.text_input("GitHub URL", placeholder="https://github.com/...")
        dashboard_url = st.text_input("Dashboard URL", placeholder="https://...")
        if st.form_submit_button("Create project"):
            fields = form_fields(
                {
                    "name": name,
                    "description": description,
                    "status": status,
                    "ranking": ranking,
                    "github_url": github_url,
                    "dashboard_url": dashboard_url,
                }
            )
            if run_action(mutator.create, fields) is not None:
                st.rerun()

tab_board, tab_stats = st.tabs(["Board", "Summary"])

with tab_board:
    columns = kanban_columns(cache.rows, PROJECT_STATUSES)
    for col, (status, projects) in zip(st.columns(len(columns)), columns.items()):
        with col:
            st.markdown(column_header_html(status, len(projects)), unsafe_allow_html=True)
            if not projects:
                st.caption("No projects")
            for project in projects:
                with st.container(border=True):
                    st.markdown(f"**{project['name']}**")
                    if project.get("description"):
                        st.caption(project["description"][:140])
                    st.markdown(card_meta(project, counter.get("project", project["id"])), unsafe_allow_html=True)
                    links = []
                    if project.get("github_url"):
                        links.append(f"[Repo]({project['github_url']})")
                    if project.get("dashboard_url"):
                        links.append(f"[Live]({project['dashboard_url']})")
                    if links:
                        st.markdown(" · ".join(links))
                    if st.button(
                        "Open",
                        key=f"open-project-{project['id']}",
                        on_click=_open_detail,
                        args=(project["id"],),
                    ):
                        st.switch_page("pages/3_Project_Detail.py")

with tab_stats:
    st.plotly_chart(status_chart(cache.rows, PROJECT_STATUSES, "Projects by status"), use_container_width=True)
    df = records_to_df(cache.rows, ["name", "status", "ranking", "github_url", "dashboard_url", "updated_at"])
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.download_button(
        "Export CSV",
        df.to_csv(index=False).encode("utf-8"),
        file_name="projects.csv",
        mime="text/csv",
    )

flush_notifications(notifier)
