"""Jira API client wrapper (REST v2 + startAt search pagination)."""

from __future__ import annotations

import hashlib
import json
import time
from typing import Any

from jira import JIRA, JIRAError

from .config import JIRA_REST_API_VERSION, MAX_RESULTS_PER_PAGE, SEARCH_CACHE_TTL_SECONDS


class JiraAPI:
    def __init__(self, server: str, email: str | None = None, token: str | None = None):
        self.server = server.rstrip("/")
        options = {"server": self.server, "rest_api_version": JIRA_REST_API_VERSION}
        if email and token:
            self.client = JIRA(basic_auth=(email, token), options=options)
        else:
            # Public trackers (e.g. Apache) allow anonymous reads
            self.client = JIRA(options=options)
        # Simple in-memory cache: {(hash): (timestamp, data)}
        self._cache: dict[str, tuple[float, list]] = {}
        self._cache_ttl = SEARCH_CACHE_TTL_SECONDS

    def clear_cache(self) -> None:
        """Reset the in-memory search cache."""
        cache = getattr(self, "_cache", None)
        if isinstance(cache, dict):
            cache.clear()

    def _cache_key(self, jql: str, fields, page_size: int) -> str:
        payload = {
            "jql": jql,
            "fields": fields,
            "page_size": page_size,
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()

    def project_versions(self, project_key: str) -> list[dict[str, Any]]:
        if not project_key:
            raise ValueError("project_key cannot be empty")
        try:
            versions = self.client.project_versions(project_key)
        except JIRAError as exc:  # pragma: no cover - network error path
            raise RuntimeError(f"Failed to fetch versions for {project_key}: {exc}") from exc
        return [v.raw if hasattr(v, "raw") else v for v in versions]

    def search_paginated(
        self,
        jql: str,
        fields: list[str] | None = None,
        page_size: int = MAX_RESULTS_PER_PAGE,
    ) -> list[dict[str, Any]]:
        session = getattr(self.client, "_session", None)
        if session is None:
            raise RuntimeError("JIRA session unavailable")
        url = f"{self.server}/rest/api/{JIRA_REST_API_VERSION}/search"
        key = self._cache_key(jql, fields, page_size)
        now = time.time()
        cached = self._cache.get(key)
        if cached and (now - cached[0]) < self._cache_ttl:
            return cached[1]
        params: dict[str, Any] = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        out: list[dict[str, Any]] = []
        start_at = 0
        while True:
            qp = dict(params)
            qp["startAt"] = start_at
            resp = session.get(url, params=qp)
            if resp.status_code >= 400:
                raise RuntimeError(f"Search failed {resp.status_code}: {resp.text[:200]}")
            data = resp.json()
            issues = data.get("issues", []) or []
            out.extend(issues)
            total = int(data.get("total", 0) or 0)
            # servers may cap maxResults below the requested page size
            start_at += len(issues)
            if not issues or start_at >= total:
                break
        self._cache[key] = (now, out)
        return out
