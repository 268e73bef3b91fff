"""Shared-password gate for the dashboard.

This is basic access control for an internal tool, not user
authentication: one configured password, and a session token derived from
it and the server secret.
"""
from __future__ import annotations

import base64
import hmac
import logging
from typing import Any, MutableMapping, Optional

from partnership.config import DashboardConfig


logger = logging.getLogger(__name__)

SESSION_KEY = "auth_token"


def generate_auth_token(password: str, secret: str) -> str:
    return base64.b64encode(f"{password}:{secret}".encode("utf-8")).decode("ascii")


def gate_enabled(config: DashboardConfig) -> bool:
    return bool(config.app_password)


def login(password: str, config: DashboardConfig) -> Optional[str]:
    """Token for a correct password, ``None`` otherwise."""
    if not gate_enabled(config):
        return generate_auth_token("", config.auth_secret)
    if not hmac.compare_digest(str(password or ""), str(config.app_password)):
        logger.info("rejected login attempt")
        return None
    return generate_auth_token(str(config.app_password), config.auth_secret)


def is_authorized(token: Optional[str], config: DashboardConfig) -> bool:
    # No password configured: the gate stays open for local development.
    if not gate_enabled(config):
        return True
    if not token:
        return False
    expected = generate_auth_token(str(config.app_password), config.auth_secret)
    return hmac.compare_digest(token, expected)


def is_logged_in(session_state: MutableMapping[str, Any], config: DashboardConfig) -> bool:
    return is_authorized(session_state.get(SESSION_KEY), config)


def set_login_state(session_state: MutableMapping[str, Any], token: Optional[str]) -> None:
    if token:
        session_state[SESSION_KEY] = token
    else:
        session_state.pop(SESSION_KEY, None)


def logout(session_state: MutableMapping[str, Any]) -> None:
    set_login_state(session_state, None)


def require_login(config: DashboardConfig) -> None:
    """Render the password form and stop the script until the session is in."""
    import streamlit as st

    if is_logged_in(st.session_state, config):
        return

    st.title("Partnership Dashboard")
    with st.form("login-form"):
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        token = login(password, config)
        if token:
            set_login_state(st.session_state, token)
            st.rerun()
        st.error("Invalid password")
    st.stop()
