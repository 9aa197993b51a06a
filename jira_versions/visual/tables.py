"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import streamlit as st

from jira_versions.analytics.versions.cleaning import RemovedTicket
from jira_versions.core.column_config import get_columns


def add_ticket_link(df: pd.DataFrame, server: str, key_col: str = "key", label: str = "Ticket"):
    if df.empty or key_col not in df.columns:
        return df, {}
    out = df.copy()
    base = server.rstrip("/")
    out[label] = out[key_col].astype(str).apply(lambda k: f"{base}/browse/{k}" if k and k != "nan" else "")
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"browse/(.*)$",
            help="Open in Jira",
            width="medium",
        )
    }
    return out, cfg


def removed_to_dataframe(removed: Sequence[RemovedTicket]) -> pd.DataFrame:
    rows = [
        {
            "key": r.ticket.key,
            "stage": r.stage,
            "reason": r.reason,
            "created": r.ticket.created,
        }
        for r in removed
    ]
    return pd.DataFrame(rows, columns=["key", "stage", "reason", "created"])


def prepare_ticket_table(df: pd.DataFrame, server: str, set_name: str = "audit"):
    if df.empty:
        return df, [], {}
    table, cfg = add_ticket_link(df, server)
    display_cols = [col for col in get_columns(set_name) if col in table.columns and col != "key"]
    if "Ticket" in table.columns:
        display_cols.insert(0, "Ticket")
    return table, display_cols, cfg
