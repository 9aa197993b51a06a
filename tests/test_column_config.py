from jira_versions.core.column_config import get_columns, load_column_sets
from jira_versions.core.config import RELEASE_EXPORT_COLUMNS


def test_packaged_yaml_defines_all_sets():
    sets = load_column_sets(reload=True)
    assert {"tickets", "releases", "audit"} <= set(sets)
    assert get_columns("tickets")[0] == "key"
    assert "affected_versions" in get_columns("tickets")
    assert get_columns("unknown") == []


def test_custom_yaml_overrides_only_listed_sets(tmp_path):
    (tmp_path / "columns.yaml").write_text("sets:\n  tickets:\n    - key\n    - injected_version\n")
    sets = load_column_sets(tmp_path)
    assert sets["tickets"] == ["key", "injected_version"]
    assert sets["releases"] == list(RELEASE_EXPORT_COLUMNS)


def test_missing_or_broken_yaml_falls_back_to_defaults(tmp_path):
    assert load_column_sets(tmp_path)["releases"] == list(RELEASE_EXPORT_COLUMNS)
    (tmp_path / "columns.yaml").write_text("sets: [unclosed\n")
    assert load_column_sets(tmp_path)["releases"] == list(RELEASE_EXPORT_COLUMNS)
