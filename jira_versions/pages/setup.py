"""Connection setup page: collect Jira credentials and initialize VersionService."""

from __future__ import annotations

import streamlit as st

from jira_versions.app import register_page
from jira_versions.core.config import JIRA_DEFAULT_SERVER
from jira_versions.core.jira_client import JiraAPI
from jira_versions.core.service import VersionService


@register_page("Setup / Connection")
def setup_page():
    st.title("Jira Connection Setup")
    st.caption("Credentials are optional for public trackers such as Apache Jira.")

    jira_secrets = st.secrets.get("jira", {})
    secret_server = jira_secrets.get("JIRA_SERVER") or st.secrets.get("JIRA_SERVER")
    secret_email = jira_secrets.get("JIRA_EMAIL") or st.secrets.get("JIRA_EMAIL")
    secret_token = jira_secrets.get("JIRA_API_TOKEN") or st.secrets.get("JIRA_API_TOKEN")

    server = st.text_input(
        "Jira Server URL",
        value=st.session_state.get("jira_server") or secret_server or JIRA_DEFAULT_SERVER,
    )
    email = st.text_input(
        "Email / Username (optional)",
        value=st.session_state.get("jira_email") or secret_email or "",
    )
    token = st.text_input(
        "API Token (optional)",
        type="password",
        value=secret_token or "",
    )
    ttl = st.number_input("Client cache TTL (seconds)", min_value=60, max_value=3600, value=300)
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not server:
            st.error("Server URL required.")
            return
        if bool(email) != bool(token):
            st.error("Provide both email and token, or neither for anonymous access.")
            return
        try:
            api = JiraAPI(server, email or None, token or None)
            api._cache_ttl = float(ttl)
            st.session_state["jira_server"] = server
            st.session_state["jira_email"] = email
            st.session_state["version_service"] = VersionService(api)
            st.success("Connection initialized.")
        except Exception as e:  # pragma: no cover
            st.error(f"Failed to initialize Jira client: {e}")

    if "version_service" in st.session_state:
        st.info("VersionService ready.")
