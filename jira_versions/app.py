"""Application entry point: page registry and router."""

from __future__ import annotations

import streamlit as st

PAGES = {}


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def main():
    st.sidebar.title("Defect Version Audit")
    pages = list(PAGES.keys())
    if not pages:
        st.write("No pages registered yet.")
        return
    preferred_order = [
        "Version Audit",
        "Setup / Connection",
    ]

    ordered = [name for name in preferred_order if name in pages]
    trailing = sorted(name for name in pages if name not in preferred_order)
    pages = ordered + trailing

    # If setup exists and no version_service yet, default to setup page
    if "Setup / Connection" in pages and "version_service" not in st.session_state:
        default = pages.index("Setup / Connection")
    else:
        default = 0
    page = st.sidebar.selectbox("Page", pages, index=default)
    audit = st.session_state.get("audit")
    if audit:
        data, result = audit
        st.sidebar.caption(
            f"Last audit: {data.project_key}, {len(result.tickets)} of {len(data.tickets)} ticket(s) kept"
        )
    PAGES[page]()


if __name__ == "__main__":
    main()
