from datetime import UTC, datetime

import run_pipeline
from jira_versions.analytics.versions.cleaning import CleaningResult
from jira_versions.core.catalog import ReleaseCatalog
from jira_versions.core.models import ReleaseModel, TicketModel
from jira_versions.core.service import ProjectData

R1 = ReleaseModel(id="1", name="1.0", release_date=datetime(2020, 1, 1, tzinfo=UTC))


class FakeService:
    calls = []

    def __init__(self, api):
        self.api = api

    def run(self, project_key, cold_start_keys):
        FakeService.calls.append((project_key, list(cold_start_keys)))
        if project_key == "BROKEN":
            raise RuntimeError("boom")
        ticket = TicketModel(key=f"{project_key}-1", created=R1.release_date, opening_version=R1)
        data = ProjectData(project_key=project_key, releases=[R1], catalog=ReleaseCatalog.build([R1]), tickets=[ticket])
        return data, CleaningResult(tickets=[ticket])


def _patch(monkeypatch):
    FakeService.calls = []
    monkeypatch.setattr(run_pipeline, "JiraAPI", lambda server, email, token: object())
    monkeypatch.setattr(run_pipeline, "VersionService", FakeService)


def test_parse_args_defaults():
    args = run_pipeline.parse_args([])
    assert args.project == "BOOKKEEPER"
    assert args.cold_start is None


def test_main_exports_both_csvs(monkeypatch, tmp_path):
    _patch(monkeypatch)
    code = run_pipeline.main(["--project", "ZK", "--cold-start", "A", "--cold-start", "B", "--output-dir", str(tmp_path)])
    assert code == 0
    assert FakeService.calls == [("ZK", ["A", "B"])]
    assert (tmp_path / "ZK_releases.csv").exists()
    assert (tmp_path / "ZK_tickets.csv").exists()


def test_main_returns_error_code_on_fetch_failure(monkeypatch, tmp_path):
    _patch(monkeypatch)
    assert run_pipeline.main(["--project", "BROKEN", "--output-dir", str(tmp_path)]) == 1
    assert FakeService.calls == [("BROKEN", ["OPENJPA"])]
    assert not any(tmp_path.iterdir())
