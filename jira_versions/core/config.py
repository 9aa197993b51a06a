"""Central configuration, constants, and tuning knobs for the version audit."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Jira Connection Settings
# =============================================================================
JIRA_DEFAULT_SERVER = "https://issues.apache.org/jira"
JIRA_REST_API_VERSION = "2"
TIMEZONE = "UTC"

# Page size for the classic startAt/maxResults search pagination
MAX_RESULTS_PER_PAGE = 100

# In-memory search cache lifetime
SEARCH_CACHE_TTL_SECONDS = 300.0

# =============================================================================
# Project Selection
# =============================================================================
DEFAULT_PROJECT_KEY = "BOOKKEEPER"

# Projects whose tickets bootstrap the proportion before the target project
# has enough history of its own
COLD_START_PROJECT_KEYS: Sequence[str] = ("OPENJPA",)

# =============================================================================
# Ticket Query
# =============================================================================
BUG_JQL_TEMPLATE = (
    "project = {project_key} AND issuetype = Bug AND resolution = Fixed "
    "AND status in (Closed, Resolved)"
)

JIRA_TICKET_FIELDS: Sequence[str] = (
    "key",
    "summary",
    "created",
    "resolutiondate",
    "status",
    "resolution",
    "versions",  # affected versions
    "fixVersions",
)

# Jira release dates come as plain calendar days
RELEASE_DATE_FORMAT = "%Y-%m-%d"

# =============================================================================
# Proportion Estimation
# =============================================================================
# Leading share of the OV-sorted tickets estimated from the external training set
COLD_START_FRACTION: float = 0.2

# =============================================================================
# Export
# =============================================================================
VERSION_LIST_SEPARATOR = ";"
EXPORT_DATE_FORMAT = "%Y-%m-%d"
DEFAULT_OUTPUT_DIR = "target"

TICKET_EXPORT_COLUMNS: Sequence[str] = (
    "key",
    "created",
    "opening_version",
    "fixed_versions",
    "injected_version",
    "affected_versions",
)

RELEASE_EXPORT_COLUMNS: Sequence[str] = (
    "id",
    "name",
    "release_date",
)

TICKET_AUDIT_COLUMNS: Sequence[str] = (
    "key",
    "summary",
    "created",
    "resolution_date",
    "opening_version",
    "injected_version",
    "fixed_version",
    "affected_versions",
    "injected_origin",
    "proportion",
)


@dataclass(slots=True)
class AppSettings:
    output_dir: str = DEFAULT_OUTPUT_DIR
    csv_encoding: str = "utf-8"
    max_table_rows: int = 1000


SETTINGS = AppSettings()
