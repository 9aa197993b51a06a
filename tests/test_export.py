from datetime import UTC, datetime

import pandas as pd

from jira_versions.core.column_config import get_columns
from jira_versions.core.export import export_releases_csv, export_tickets_csv, format_for_export
from jira_versions.core.models import ReleaseModel, TicketModel


def _release(name, y=None, m=1, d=1):
    day = datetime(y, m, d, tzinfo=UTC) if y else None
    return ReleaseModel(id=name, name=name, release_date=day)


R1 = _release("4.0", 2014, 1, 20)
R2 = _release("4.1", 2014, 6, 2)


def _read(path):
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def test_export_tickets_csv_writes_configured_columns(tmp_path):
    tickets = [
        TicketModel(
            key="BK-1",
            created=datetime(2014, 2, 3, 10, 0, tzinfo=UTC),
            affected_versions=[R1, R2],
            fixed_versions=[R2],
            opening_version=R1,
            injected_version=R1,
            fixed_version=R2,
        ),
        TicketModel(key="BK-2", created=datetime(2014, 3, 1, tzinfo=UTC), opening_version=R1),
    ]
    path = export_tickets_csv(tickets, "BK", output_dir=tmp_path / "out")
    assert path == tmp_path / "out" / "BK_tickets.csv"
    df = _read(path)
    assert list(df.columns) == get_columns("tickets")
    first, second = df.iloc[0], df.iloc[1]
    assert first["created"] == "2014-02-03"
    assert first["affected_versions"] == "4.0;4.1"
    assert first["injected_version"] == "4.0"
    assert second["injected_version"] == ""
    assert second["affected_versions"] == ""


def test_export_releases_csv(tmp_path):
    path = export_releases_csv([R2, _release("next"), R1], "BK", output_dir=tmp_path)
    df = _read(path)
    assert list(df.columns) == get_columns("releases")
    assert list(df["name"]) == ["4.0", "4.1", "next"]
    assert list(df["release_date"]) == ["2014-01-20", "2014-06-02", ""]


def test_format_for_export_fills_unknown_columns():
    df = pd.DataFrame({"key": ["A"], "proportion": [None]})
    out = format_for_export(df, ["key", "proportion", "missing"])
    assert list(out.columns) == ["key", "proportion", "missing"]
    assert out.iloc[0].tolist() == ["A", "", ""]
