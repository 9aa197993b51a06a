"""Convenience launcher for the Streamlit viewer.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``jira_versions/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

from importlib import import_module
from pathlib import Path

import streamlit as st

from jira_versions.app import main

st.set_page_config(layout="wide")


def _auto_init_version_service():
    """Initialize the Jira service from Streamlit secrets if available."""
    if "version_service" in st.session_state:
        return

    jira_secrets = st.secrets.get("jira", {})
    server = jira_secrets.get("JIRA_SERVER") or st.secrets.get("JIRA_SERVER")
    email = jira_secrets.get("JIRA_EMAIL") or st.secrets.get("JIRA_EMAIL")
    token = jira_secrets.get("JIRA_API_TOKEN") or st.secrets.get("JIRA_API_TOKEN")

    if server:
        try:
            from jira_versions.core.jira_client import JiraAPI
            from jira_versions.core.service import VersionService

            api = JiraAPI(server, email, token)
            st.session_state["jira_server"] = server
            st.session_state["version_service"] = VersionService(api)
            st.sidebar.success("Jira connection successful!")
        except Exception as e:
            st.sidebar.error(f"Jira connection failed: {e}")
            st.session_state.pop("version_service", None)
    else:
        st.sidebar.warning("Jira secrets not found. Please use the Setup page.")


_auto_init_version_service()

PAGES_DIR = Path(__file__).parent / "jira_versions" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"jira_versions.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover - defensive
        print(f"Failed importing page {mod_name}: {e}")

if __name__ == "__main__":
    main()
