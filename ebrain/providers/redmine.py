"""Redmine REST API provider."""

from typing import Any

from ebrain.models import Issue, IssueUpdate
from ebrain.providers.base import RestProvider
from ebrain.settings import BrainSettings

API_KEY_HEADER = "X-Redmine-API-Key"


class RedmineProvider(RestProvider):
    name = "Redmine"

    def __init__(self, base_url: str, api_key: str) -> None:
        super().__init__(
            base_url.removesuffix("/"),
            {
                API_KEY_HEADER: api_key,
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_settings(cls, settings: BrainSettings) -> "RedmineProvider":
        return cls(settings.redmine_url, settings.redmine_api_key.get_secret_value())

    def list_issues(self, params: dict | None = None) -> Any:
        # Filters go through untouched; Redmine decides what it understands.
        query = {k: v for k, v in (params or {}).items() if v is not None}
        return self._json(self._request("GET", "/issues.json", params=query))

    def get_issue(self, issue_id: int) -> Any:
        return self._json(self._request("GET", f"/issues/{issue_id}.json"))

    def create_issue(self, issue: Issue | dict) -> Any:
        body = issue.to_payload() if isinstance(issue, Issue) else dict(issue)
        return self._json(self._request("POST", "/issues.json", json={"issue": body}))

    def update_issue(self, issue_id: int, changes: IssueUpdate | dict) -> Any:
        body = changes.to_payload() if isinstance(changes, IssueUpdate) else dict(changes)
        return self._json(self._request("PUT", f"/issues/{issue_id}.json", json={"issue": body}))
