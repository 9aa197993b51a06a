"""VersionService: orchestrates fetching, mapping, and the cleaning pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from jira_versions.analytics.metrics.coverage import log_ticket_statistics
from jira_versions.analytics.versions.cleaning import CleaningResult, clean_tickets
from jira_versions.analytics.versions.derive import prepare_tickets

from .catalog import ReleaseCatalog
from .config import BUG_JQL_TEMPLATE, COLD_START_FRACTION, COLD_START_PROJECT_KEYS, JIRA_TICKET_FIELDS
from .jira_client import JiraAPI
from .mappers import map_release, map_ticket
from .models import ReleaseModel, TicketModel

ProgressCallback = Callable[[str, int | None, int | None], None]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProjectData:
    project_key: str
    releases: list[ReleaseModel]
    catalog: ReleaseCatalog
    tickets: list[TicketModel] = field(default_factory=list)


class VersionService:
    def __init__(self, api: JiraAPI):
        self.api = api

    # ------------------ Fetch Methods ------------------
    def fetch_releases(
        self,
        project_key: str,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[ReleaseModel]:
        if progress:
            progress(f"Querying releases for {project_key}", None, None)
        raw = self.api.project_versions(project_key)
        releases = [map_release(r) for r in raw or [] if isinstance(r, dict)]
        if releases:
            logger.info("Retrieved %d versions for project %s", len(releases), project_key)
        else:
            logger.info("No versions found for project %s", project_key)
        return releases

    def fetch_bug_tickets(
        self,
        project_key: str,
        catalog: ReleaseCatalog,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[TicketModel]:
        if catalog is None:
            raise TypeError("catalog cannot be None")
        if len(catalog) == 0:
            logger.warning("Release catalog for %s is empty - no tickets will be processed", project_key)
            return []
        jql = BUG_JQL_TEMPLATE.format(project_key=project_key)
        if progress:
            progress(f"Querying fixed bugs for {project_key}", None, None)
        raw = self.api.search_paginated(jql, fields=list(JIRA_TICKET_FIELDS))
        tickets = []
        total = len(raw)
        for idx, issue in enumerate(raw, start=1):
            if not isinstance(issue, dict) or not issue.get("key"):
                continue
            tickets.append(map_ticket(issue, catalog))
            if progress and (idx % 100 == 0 or idx == total):
                progress(f"Decoding tickets for {project_key}", idx, total)
        logger.info("Successfully processed %d tickets for %s", len(tickets), project_key)
        return tickets

    def fetch_project(
        self,
        project_key: str,
        *,
        progress: ProgressCallback | None = None,
    ) -> ProjectData:
        if not project_key:
            raise ValueError("project_key cannot be empty")
        releases = self.fetch_releases(project_key, progress=progress)
        catalog = ReleaseCatalog.build(releases)
        tickets = self.fetch_bug_tickets(project_key, catalog, progress=progress)
        return ProjectData(project_key=project_key, releases=releases, catalog=catalog, tickets=tickets)

    def fetch_training_tickets(
        self,
        project_keys: Sequence[str],
        *,
        progress: ProgressCallback | None = None,
    ) -> list[TicketModel]:
        """Cold start tickets, each derived against its own project's catalog."""
        training: list[TicketModel] = []
        for key in project_keys:
            data = self.fetch_project(key, progress=progress)
            training.extend(prepare_tickets(data.tickets, data.catalog))
        return training

    # ------------------ Pipeline ------------------
    def run(
        self,
        project_key: str,
        cold_start_keys: Sequence[str] = COLD_START_PROJECT_KEYS,
        *,
        cold_start_fraction: float = COLD_START_FRACTION,
        progress: ProgressCallback | None = None,
    ) -> tuple[ProjectData, CleaningResult]:
        if hasattr(self.api, "clear_cache"):
            self.api.clear_cache()
        data = self.fetch_project(project_key, progress=progress)
        training = self.fetch_training_tickets(cold_start_keys, progress=progress)
        log_ticket_statistics(prepare_tickets(data.tickets, data.catalog), label=f"{project_key} tickets")
        if progress:
            progress("Cleaning tickets and estimating injected versions", None, None)
        result = clean_tickets(data.tickets, training, data.catalog, cold_start_fraction=cold_start_fraction)
        log_ticket_statistics(result.tickets, label=f"cleaned {project_key} tickets")
        return data, result
