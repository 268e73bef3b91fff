import streamlit as st

from partnership.aggregation import status_counts
from partnership.auth import gate_enabled, logout
from partnership.domain import IDEA_STATUSES, IDEAS, PROJECT_STATUSES, PROJECTS, TASKS
from partnership.errors import StoreError
from partnership.seed import seed_sample_data
from partnership.ui import flush_notifications, page_setup, status_chart

config, store, notifier = page_setup("Partnership Dashboard")
flush_notifications(notifier)

st.title("Partnership Dashboard")
st.caption("Track partnership ideas and projects from first spark to shipped.")

ideas = store.list(IDEAS)
projects = store.list(PROJECTS)
open_tasks = store.count(TASKS, {"status": "pending"}) + store.count(TASKS, {"status": "in-progress"})

m1, m2, m3, m4 = st.columns(4)
m1.metric("Ideas", len(ideas))
m2.metric("Approved ideas", status_counts(ideas, IDEA_STATUSES)["approved"])
m3.metric("Active projects", status_counts(projects, PROJECT_STATUSES)["in-progress"])
m4.metric("Open tasks", open_tasks)

c1, c2 = st.columns(2)
with c1:
    st.plotly_chart(status_chart(ideas, IDEA_STATUSES, "Ideas by status"), use_container_width=True)
with c2:
    st.plotly_chart(status_chart(projects, PROJECT_STATUSES, "Projects by status"), use_container_width=True)

st.page_link("pages/1_Ideas.py", label="Ideas board", icon="💡")
st.page_link("pages/2_Projects.py", label="Projects board", icon="🛠️")

with st.sidebar.expander("Settings", expanded=False):
    st.write(f"Database: `{config.database_url.split(':', 1)[0]}`")
    st.write(f"Task transitions: `{config.task_transition_policy}`")
    st.write(f"Concurrency check: `{'on' if config.strict_updates else 'off'}`")
    st.markdown("---")
    st.markdown("**Sample Data**")
    if st.button("Reset sample data", key="reset-sample-data"):
        try:
            seed_sample_data(store, reset=True)
        except StoreError as exc:
            notifier.error("Error seeding data", str(exc))
        else:
            for key in [k for k in st.session_state.keys() if str(k).endswith("_cache")]:
                del st.session_state[key]
            notifier.success("Data seeded successfully")
        st.rerun()
    if gate_enabled(config) and st.button("Sign out", key="sign-out"):
        logout(st.session_state)
        st.rerun()

