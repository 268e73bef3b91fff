"""Partnership dashboard: kanban boards for ideas and projects.

Rows live in a SQLAlchemy-backed record store; Streamlit pages keep
per-session caches of them and mutate through an optimistic protocol that
rolls back when the store refuses a write.
"""

__version__ = "0.1.0"
