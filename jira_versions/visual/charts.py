"""Chart builders (Altair) for the version audit."""

from __future__ import annotations

import altair as alt
import pandas as pd
import pytz

from jira_versions.core.config import TIMEZONE


def proportion_trend(df: pd.DataFrame, cold_start_p: float | None = None):
    """Scatter of the P used for each predicted IV, by opening version date.

    Returns ``(chart, points)``; chart is None when no ticket was predicted.
    """
    if df.empty or "proportion" not in df.columns or "opening_date" not in df.columns:
        return None, pd.DataFrame()
    tz = pytz.timezone(TIMEZONE)
    tmp = df.copy()
    tmp["proportion"] = pd.to_numeric(tmp["proportion"], errors="coerce")
    tmp = tmp[tmp["proportion"].notna()]
    if tmp.empty:
        return None, tmp
    tmp["opening_dt"] = pd.to_datetime(tmp["opening_date"], utc=True, errors="coerce").dt.tz_convert(tz)
    tmp = tmp[tmp["opening_dt"].notna()]
    if tmp.empty:
        return None, tmp
    points = (
        alt.Chart(tmp)
        .mark_circle(color="#1f77b4", opacity=0.75, size=60)
        .encode(
            x=alt.X("opening_dt:T", title="Opening Version Date"),
            y=alt.Y("proportion:Q", title="Proportion (P)"),
            tooltip=[
                alt.Tooltip("key:N", title="Ticket"),
                alt.Tooltip("opening_version:N", title="OV"),
                alt.Tooltip("injected_version:N", title="Predicted IV"),
                alt.Tooltip("fixed_version:N", title="FV"),
                alt.Tooltip("proportion:Q", title="P", format=".3f"),
            ],
        )
    )
    chart = points
    if cold_start_p is not None:
        rule = (
            alt.Chart(pd.DataFrame({"p": [cold_start_p]}))
            .mark_rule(color="#d62728", strokeDash=[4, 4])
            .encode(y="p:Q")
        )
        chart = points + rule
    return chart.properties(height=300), tmp


def removal_reasons_chart(removed: pd.DataFrame):
    if removed.empty or "reason" not in removed.columns:
        return None
    agg = removed.groupby(["stage", "reason"]).size().reset_index(name="count")
    return (
        alt.Chart(agg)
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Tickets Removed"),
            y=alt.Y("reason:N", title=None, sort="-x"),
            color=alt.Color("stage:N", title="Stage"),
            tooltip=[
                alt.Tooltip("stage:N", title="Stage"),
                alt.Tooltip("reason:N", title="Reason"),
                alt.Tooltip("count:Q", title="Count"),
            ],
        )
        .properties(height=220)
    )
