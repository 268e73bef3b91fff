import streamlit as st

from partnership.aggregation import CommentCounter, sort_history
from partnership.cache import EntityCache, OptimisticMutator
from partnership.comments import session_thread
from partnership.domain import (
    COMMENTS,
    PROJECT_HISTORY,
    PROJECT_STATUSES,
    PROJECTS,
    STATUS_LABELS,
    TASK_STATUSES,
    TASKS,
    parse_timestamp,
)
from partnership.errors import StoreError
from partnership.tasks import TaskController, TransitionPolicy, is_overdue, show_completion_notes
from partnership.ui import (
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

config, store, notifier = page_setup("Project", "🛠️")
flush_notifications(notifier)

project_id = st.query_params.get("id") or st.session_state.get("project_id")
project = store.get(PROJECTS, project_id) if project_id else None
if project is None:
    # Deleted or unknown project: back to the board.
    st.session_state.pop("project_id", None)
    st.switch_page("pages/2_Projects.py")

st.session_state.project_id = project_id

# Share the board's cache so the list and this view roll back together.
projects_cache: EntityCache = session_value("projects_cache", lambda: EntityCache(store.list(PROJECTS)))
projects_cache.reconcile(project)
projects_cache.select(project_id)
project_mutator = OptimisticMutator(
    store,
    PROJECTS,
    projects_cache,
    notifier,
    entity_label="project",
    name_field="name",
    strict=config.strict_updates,
)

task_cache: EntityCache = session_value(
    f"tasks_{project_id}_cache",
    lambda: EntityCache(store.list(TASKS, {"project_id": project_id}, descending=False)),
)
tasks = TaskController(
    store,
    project_id,
    task_cache,
    notifier,
    policy=TransitionPolicy.named(config.task_transition_policy),
    strict=config.strict_updates,
)

history_cache: EntityCache = session_value(
    f"history_{project_id}_cache",
    lambda: EntityCache(store.list(PROJECT_HISTORY, {"project_id": project_id}, order_by="entry_date")),
)
history = OptimisticMutator(
    store,
    PROJECT_HISTORY,
    history_cache,
    notifier,
    entity_label="history entry",
    name_field="summary",
    created_verb="added",
)


def _toggle(task_id, key):
    if run_action(tasks.toggle_complete, task_id) is None:
        st.session_state[key] = not st.session_state[key]


project = projects_cache.selected

st.page_link("pages/2_Projects.py", label="Back to projects", icon="⬅️")
st.title(project["name"])
st.caption(
    f"{STATUS_LABELS[project['status']]} · {format_ranking(project.get('ranking'))} · "
    f"updated {format_date(project['updated_at'])}"
)
links = []
if project.get("github_url"):
    links.append(f"[GitHub]({project['github_url']})")
if project.get("dashboard_url"):
    links.append(f"[Dashboard]({project['dashboard_url']})")
if links:
    st.markdown(" · ".join(links))
if project.get("description"):
    st.write(project["description"])

with st.expander("✏️ Edit project"):
    with st.form(f"edit-project-{project_id}"):
        name = st.text_input("Name *", value=project["name"])
        description = st.text_area("Description", value=project.get("description") or "")
        c1, c2 = st.columns(2)
        with c1:
            status = st.selectbox(
                "Status",
                PROJECT_STATUSES,
                index=PROJECT_STATUSES.index(project["status"]),
                format_func=STATUS_LABELS.get,
            )
        with c2:
            ranking = st.selectbox(
                "Ranking",
                ranking_options(),
                index=ranking_options().index(project.get("ranking")),
                format_func=format_ranking,
            )
        github_url = st.text_input("GitHub URL", value=project.get("github_url") or "")
        dashboard_url = st.text_input("Dashboard URL", value=project.get("dashboard_url") or "")
        if st.form_submit_button("Save changes"):
            changes = form_fields(
                {
                    "name": name,
                    "description": description,
                    "status": status,
                    "ranking": ranking,
                    "github_url": github_url,
                    "dashboard_url": dashboard_url,
                }
            )
            if run_action(project_mutator.update, project_id, changes) is not None:
                st.rerun()

with st.expander("🗑️ Delete project"):
    st.warning("This removes the project with its tasks, history and comments.")
    if st.button("Delete", key=f"delete-project-{project_id}", type="primary"):
        try:
            project_mutator.delete(project_id)
        except StoreError:
            st.rerun()
        st.session_state.pop("project_id", None)
        st.switch_page("pages/2_Projects.py")

tab_tasks, tab_plan, tab_history, tab_comments = st.tabs(["Tasks", "Plan", "History", "Comments"])

with tab_tasks:
    st.markdown(f"**📋 Tasks ({len(task_cache)})**")
    ordered = tasks.ordered
    if not ordered:
        st.caption('No tasks yet. Use "New task" to add one.')
    for task in ordered:
        with st.container(border=True):
            t1, t2, t3 = st.columns([0.6, 5, 1.4])
            with t1:
                toggle_key = f"toggle-{task['id']}-{task['updated_at']}"
                st.checkbox(
                    "Done",
                    value=task["status"] == "complete",
                    key=toggle_key,
                    on_change=_toggle,
                    args=(task["id"], toggle_key),
                    label_visibility="collapsed",
                )
            with t2:
                title = task["title"]
                if task["status"] in ("complete", "cancelled"):
                    title = f"~~{title}~~"
                st.markdown(title)
                if task.get("due_date"):
                    due = format_date(task["due_date"])
                    css = "pd-overdue" if is_overdue(task) else "pd-card-meta"
                    st.markdown(f"<span class='{css}'>📅 {due}</span>", unsafe_allow_html=True)
            with t3:
                st.markdown(
                    f"<span class='pd-badge pd-status-{task['status']}'>{STATUS_LABELS[task['status']]}</span>",
                    unsafe_allow_html=True,
                )
            with st.expander("Details"):
                if task.get("description"):
                    st.write(task["description"])
                if show_completion_notes(task):
                    st.info(task["completion_notes"])
                if task.get("completed_at"):
                    st.caption(f"Completed {format_date(task['completed_at'])}")
                if task.get("scheduler_job_id"):
                    st.caption(f"Scheduler job: `{task['scheduler_job_id']}`")
                with st.form(f"edit-task-{task['id']}"):
                    e_title = st.text_input("Title *", value=task["title"])
                    e_description = st.text_area("Description", value=task.get("description") or "")
                    targets = tasks.policy.targets(task["status"])
                    e_status = st.selectbox(
                        "Status",
                        targets,
                        index=targets.index(task["status"]),
                        format_func=STATUS_LABELS.get,
                    )
                    due_value = parse_timestamp(task.get("due_date"))
                    e_due = st.date_input("Due date", value=due_value.date() if due_value else None)
                    e_notes = st.text_area("Completion notes", value=task.get("completion_notes") or "")
                    if st.form_submit_button("Save task"):
                        changes = form_fields(
                            {
                                "title": e_title,
                                "description": e_description,
                                "status": e_status,
                                "due_date": e_due,
                                "completion_notes": e_notes,
                            }
                        )
                        if run_action(tasks.edit, task["id"], changes) is not None:
                            st.rerun()
                if st.button("Delete task", key=f"delete-task-{task['id']}"):
                    run_action(tasks.delete, task["id"])
                    st.rerun()

    with st.expander("➕ New task"):
        with st.form(f"new-task-{project_id}", clear_on_submit=True):
            n_title = st.text_input("Title *")
            n_description = st.text_area("Description")
            n_status = st.selectbox("Status", TASK_STATUSES, format_func=STATUS_LABELS.get)
            n_due = st.date_input("Due date", value=None)
            n_notes = st.text_area("Completion notes")
            if st.form_submit_button("Create task"):
                fields = form_fields(
                    {
                        "title": n_title,
                        "description": n_description,
                        "status": n_status,
                        "due_date": n_due,
                        "completion_notes": n_notes,
                    }
                )
                if run_action(tasks.create, fields) is not None:
                    st.rerun()

with tab_plan:
    st.markdown("**📄 Project Plan**")
    editing_key = f"plan-editing-{project_id}"
    if st.session_state.get(editing_key):
        draft = st.text_area("Plan", value=project.get("plan") or "", height=320, key=f"plan-draft-{project_id}")
        p1, p2 = st.columns([1, 6])
        with p1:
            if st.button("Save", key=f"plan-save-{project_id}"):
                saved = run_action(
                    project_mutator.update,
                    project_id,
                    {"plan": draft.strip() or None},
                    success_title="Plan updated",
                )
                if saved is not None:
                    st.session_state[editing_key] = False
                st.rerun()
        with p2:
            if st.button("Cancel", key=f"plan-cancel-{project_id}"):
                st.session_state[editing_key] = False
                st.rerun()
    else:
        if project.get("plan"):
            st.markdown(project["plan"])
        else:
            st.caption("No plan yet.")
        if st.button("Edit plan", key=f"plan-edit-{project_id}"):
            st.session_state[editing_key] = True
            st.rerun()

with tab_history:
    st.markdown("**🕘 History**")
    with st.form(f"history-form-{project_id}", clear_on_submit=True):
        summary = st.text_input("Summary *")
        details = st.text_area("Details")
        if st.form_submit_button("Add entry"):
            fields = form_fields({"project_id": project_id, "summary": summary, "details": details})
            if run_action(history.create, fields) is not None:
                st.rerun()
    entries = sort_history(history_cache.rows)
    if not entries:
        st.caption("No history entries yet.")
    for entry in entries:
        stamp = parse_timestamp(entry["entry_date"])
        st.markdown(f"**{entry['summary']}**")
        st.caption(stamp.strftime("%Y-%m-%d %H:%M") if stamp else "")
        if entry.get("details"):
            st.write(entry["details"])

with tab_comments:
    counter: CommentCounter = session_value(
        "project_counter_cache", lambda: CommentCounter.from_comments(store.list(COMMENTS))
    )
    thread = session_thread(st.session_state, "project_thread_cache", store, "project", project_id, notifier, counter)
    render_comments(thread, config.comment_authors, key=f"project-{project_id}")

flush_notifications(notifier)
