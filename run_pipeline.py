#!/usr/bin/env python3
"""
Batch driver: fetch a Jira project, derive and estimate defect versions, export CSVs.

Usage:
    python run_pipeline.py                                  # BOOKKEEPER, cold start from OPENJPA
    python run_pipeline.py --project ZOOKEEPER --cold-start OPENJPA --cold-start AVRO
    python run_pipeline.py --output-dir out --log-level DEBUG

Credentials are optional (public trackers allow anonymous reads) and are read
from JIRA_SERVER, JIRA_EMAIL and JIRA_API_TOKEN.
"""

import argparse
import logging
import os
import sys

from jira_versions.core.config import (
    COLD_START_PROJECT_KEYS,
    DEFAULT_PROJECT_KEY,
    JIRA_DEFAULT_SERVER,
    SETTINGS,
)
from jira_versions.core.export import export_releases_csv, export_tickets_csv
from jira_versions.core.jira_client import JiraAPI
from jira_versions.core.service import VersionService

logger = logging.getLogger("run_pipeline")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Derive injected/affected versions for fixed Jira bugs")
    parser.add_argument("--project", default=DEFAULT_PROJECT_KEY, help="Target Jira project key")
    parser.add_argument(
        "--cold-start",
        action="append",
        dest="cold_start",
        help="Project key supplying cold start tickets (repeatable)",
    )
    parser.add_argument("--output-dir", default=SETTINGS.output_dir, help="Directory for CSV output")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cold_start = args.cold_start or list(COLD_START_PROJECT_KEYS)

    server = os.environ.get("JIRA_SERVER", JIRA_DEFAULT_SERVER)
    email = os.environ.get("JIRA_EMAIL")
    token = os.environ.get("JIRA_API_TOKEN")

    try:
        service = VersionService(JiraAPI(server, email, token))
        data, result = service.run(args.project, cold_start)
    except RuntimeError:
        logger.exception("Error retrieving data for %s", args.project)
        return 1

    export_releases_csv(data.releases, args.project, args.output_dir)
    export_tickets_csv(result.tickets, args.project, args.output_dir)
    logger.info(
        "Kept %d of %d tickets (cold start P=%.4f, removed %d)",
        len(result.tickets),
        len(data.tickets),
        result.cold_start_p,
        len(result.removed),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
