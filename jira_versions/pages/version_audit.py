"""Version Audit page.

Runs the cleaning pipeline for one project and shows the derived versions,
the removed tickets with their reasons, and the proportions used for
predicted injected versions.
"""

from __future__ import annotations

import streamlit as st

from jira_versions.analytics.metrics.coverage import missing_version_summary
from jira_versions.analytics.versions.cleaning import CleaningResult
from jira_versions.app import register_page
from jira_versions.core.column_config import get_columns
from jira_versions.core.config import COLD_START_FRACTION, COLD_START_PROJECT_KEYS, DEFAULT_PROJECT_KEY, SETTINGS
from jira_versions.core.export import format_for_export
from jira_versions.core.mappers import releases_to_dataframe, tickets_to_dataframe
from jira_versions.core.service import ProjectData, VersionService
from jira_versions.visual.charts import proportion_trend, removal_reasons_chart
from jira_versions.visual.progress import ProgressReporter
from jira_versions.visual.tables import prepare_ticket_table, removed_to_dataframe


def render_audit(data: ProjectData, result: CleaningResult, server: str) -> None:
    kept, total = len(result.tickets), len(data.tickets)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Releases", len(data.releases))
    c2.metric("Tickets kept", f"{kept} / {total}")
    c3.metric("Cold start P", f"{result.cold_start_p:.3f}")
    c4.metric("Flags consistent", "yes" if result.consistent else "no")

    st.subheader("Missing versions after cleaning")
    st.dataframe(missing_version_summary(result.tickets), hide_index=True)

    df = tickets_to_dataframe(result.tickets)
    st.subheader("Proportion used for predicted injected versions")
    chart, points = proportion_trend(df, result.cold_start_p)
    if chart is None:
        st.info("No injected version was predicted.")
    else:
        st.altair_chart(chart, use_container_width=True)
        st.caption(f"{len(points)} ticket(s) with a predicted injected version.")

    st.subheader("Cleaned tickets")
    prepared, display_cols, cfg = prepare_ticket_table(df, server)
    if display_cols:
        st.dataframe(
            prepared[display_cols].head(SETTINGS.max_table_rows),
            hide_index=True,
            column_config=cfg,
        )
        csv = format_for_export(df, get_columns("tickets")).to_csv(index=False).encode(SETTINGS.csv_encoding)
        st.download_button(
            "Download Tickets CSV",
            data=csv,
            file_name=f"{data.project_key}_tickets.csv",
            mime="text/csv",
        )

    removed = removed_to_dataframe(result.removed)
    st.subheader("Removed tickets")
    reasons = removal_reasons_chart(removed)
    if reasons is not None:
        st.altair_chart(reasons, use_container_width=True)
    st.dataframe(removed, hide_index=True)

    releases = releases_to_dataframe(data.releases)
    with st.expander("Releases"):
        st.dataframe(releases, hide_index=True)
        if not releases.empty:
            st.download_button(
                "Download Releases CSV",
                data=format_for_export(releases, get_columns("releases")).to_csv(index=False).encode(SETTINGS.csv_encoding),
                file_name=f"{data.project_key}_releases.csv",
                mime="text/csv",
            )


@register_page("Version Audit")
def version_audit_page():
    st.title("Defect Version Audit")
    st.caption("Derive opening, injected and affected versions for fixed bugs.")
    service: VersionService | None = st.session_state.get("version_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    project = st.text_input("Project key", value=st.session_state.get("project_key", DEFAULT_PROJECT_KEY))
    cold_start_raw = st.text_input("Cold start project keys (comma separated)", value=", ".join(COLD_START_PROJECT_KEYS))
    fraction = st.slider("Cold start fraction", min_value=0.0, max_value=1.0, value=COLD_START_FRACTION, step=0.05)
    run = st.button("Run Audit", type="primary")

    if run:
        project = project.strip().upper()
        cold_start = [k.strip().upper() for k in cold_start_raw.split(",") if k.strip()]
        st.session_state["project_key"] = project
        reporter = ProgressReporter(f"Auditing versions for {project}")
        try:
            data, result = service.run(project, cold_start, cold_start_fraction=fraction, progress=reporter.callback)
            st.session_state["audit"] = (data, result)
            reporter.complete(f"Kept {len(result.tickets)} of {len(data.tickets)} ticket(s).")
        except Exception as exc:  # pragma: no cover
            reporter.error(f"Failed to audit {project}: {exc}")
            raise

    audit = st.session_state.get("audit")
    if not audit:
        st.info("No audit computed yet.")
        return
    data, result = audit
    render_audit(data, result, st.session_state.get("jira_server", ""))
