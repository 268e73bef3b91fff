from __future__ import annotations

import logging
from typing import Any, Dict, List

from partnership.config import DashboardConfig
from partnership.domain import IDEAS, PROJECTS
from partnership.errors import StoreError
from partnership.store import RecordStore


logger = logging.getLogger(__name__)


SAMPLE_PROJECTS: List[Dict[str, Any]] = [
    {
        "name": "PTR Project (OC Probate Rulings)",
        "status": "in-progress",
        "github_url": "https://github.com/wlg949/oc-rulings-dashboard",
        "dashboard_url": "https://oc-rulings-dashboard.vercel.app",
        "description": "Legal intelligence from Orange County Superior Court probate tentative "
        "rulings. Weekly auto-scrape, PDF extraction, AI summaries.",
    },
    {
        "name": "Sleep Dashboard",
        "status": "in-progress",
        "github_url": "https://github.com/wlg949/sleep-dashboard",
        "dashboard_url": "https://sleep-dashboard.vercel.app",
        "description": "Eight Sleep data visualization with AI insights. Daily sync of sleep "
        "scores, HRV, heart rate.",
    },
    {
        "name": "Partnership Dashboard",
        "status": "in-progress",
        "github_url": "https://github.com/wlg949/partnership-dashboard",
        "dashboard_url": "https://partnership-dashboard-omega.vercel.app",
        "description": "Kanban dashboard for partnership ideas and project tracking.",
    },
    {
        "name": "WLG Website Redesign",
        "status": "in-progress",
        "github_url": "https://github.com/wlg949/wlg-website",
        "dashboard_url": "https://www.watsonlaw.org",
        "description": "Watson Law Group website modernization with Anthropic-inspired aesthetic.",
    },
]

SAMPLE_IDEAS: List[Dict[str, Any]] = [
    {
        "title": "AI Document Summarization",
        "description": "Use Claude to summarize trust instruments, wills, and probate pleadings "
        "for case preparation.",
        "priority": "high",
    },
    {
        "title": "Court Hearing Reminder Automation",
        "description": "Auto-alert 7 days before hearings to check probate notes and file supplements.",
        "priority": "high",
    },
    {
        "title": "OC Case Party/Attorney Lookup",
        "description": "Scraper to pull party names and attorneys from OC court case search.",
        "priority": "medium",
    },
    {
        "title": "Calendar Sync with Court Dates",
        "description": "Automatically sync court hearing dates from Smokeball to Outlook calendar.",
        "priority": "medium",
    },
    {
        "title": "Sleep-Productivity Correlation",
        "description": "Track whether sleep scores correlate with work output and billable hours.",
        "priority": "low",
    },
    {
        "title": "Client Intake Form Automation",
        "description": "Digital intake forms that auto-populate into Smokeball matter creation.",
        "priority": "medium",
    },
]


def seed_sample_data(store: RecordStore, *, reset: bool = False) -> Dict[str, int]:
    """Insert the demo projects and ideas; ``reset`` clears both tables first."""
    if reset:
        # Comments, tasks and history go with their parents via ON DELETE CASCADE.
        store.delete_all(IDEAS)
        store.delete_all(PROJECTS)

    for project in SAMPLE_PROJECTS:
        store.insert(PROJECTS, project)
    for idea in SAMPLE_IDEAS:
        store.insert(IDEAS, {**idea, "status": "new", "source": "daily_brief"})

    logger.info("seeded %d projects and %d ideas", len(SAMPLE_PROJECTS), len(SAMPLE_IDEAS))
    return {PROJECTS: len(SAMPLE_PROJECTS), IDEAS: len(SAMPLE_IDEAS)}


def bootstrap(store: RecordStore, config: DashboardConfig) -> bool:
    """Seed an empty local database so a fresh checkout shows something.

    Only the repo-local SQLite file is ever seeded automatically; shared
    databases are left alone. Returns True when rows were inserted.
    """
    if not config.seed_sample_data or not config.is_local_sqlite:
        return False
    try:
        if store.count(PROJECTS) or store.count(IDEAS):
            return False
        seed_sample_data(store)
    except StoreError as exc:
        logger.warning("sample data bootstrap skipped: %s", exc)
        return False
    return True
