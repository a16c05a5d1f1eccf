"""ServiceNow Table API provider."""

import base64
from collections.abc import Mapping
from typing import Any

from ebrain.models import TableQuery, TableRecord
from ebrain.providers.base import RestProvider
from ebrain.settings import BrainSettings

TABLE_API_PATH = "/api/now/table"


def resolve_base_url(instance: str) -> str:
    """Expand an instance short-name or full URL into the Table API base URL.

    acme                    → https://acme.service-now.com/api/now/table
    https://snow.example/   → https://snow.example/api/now/table
    """
    if instance.startswith("http"):
        base = instance.removesuffix("/")
    else:
        base = f"https://{instance}.service-now.com"
    return f"{base}{TABLE_API_PATH}"


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


def _record_body(record: TableRecord | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(record, TableRecord):
        return record.to_payload()
    return dict(record)


class ServiceNowProvider(RestProvider):
    name = "ServiceNow"

    def __init__(
        self,
        instance: str,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif username and password:
            headers["Authorization"] = basic_auth_header(username, password)
        # neither: requests go out unauthenticated
        super().__init__(resolve_base_url(instance), headers)

    @classmethod
    def from_settings(cls, settings: BrainSettings) -> "ServiceNowProvider":
        return cls(
            settings.snow_instance,
            username=settings.snow_user,
            password=settings.snow_pass.get_secret_value() if settings.snow_pass else None,
            token=settings.snow_token.get_secret_value() if settings.snow_token else None,
        )

    @property
    def auth_header(self) -> str | None:
        return self._client.headers.get("Authorization")

    def get_records(self, table: str, query: TableQuery | Mapping[str, Any] | None = None) -> Any:
        if isinstance(query, TableQuery):
            params = query.to_params()
        else:
            params = dict(query or {})
        return self._json(self._request("GET", f"/{table}", params=params))

    def get_record(self, table: str, sys_id: str, display_value: bool | None = None) -> Any:
        params = TableQuery(display_value=display_value).to_params()
        return self._json(self._request("GET", f"/{table}/{sys_id}", params=params))

    def create_record(self, table: str, record: TableRecord | Mapping[str, Any]) -> Any:
        return self._json(self._request("POST", f"/{table}", json=_record_body(record)))

    def update_record(self, table: str, sys_id: str, record: TableRecord | Mapping[str, Any]) -> Any:
        return self._json(self._request("PUT", f"/{table}/{sys_id}", json=_record_body(record)))

    def delete_record(self, table: str, sys_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/{table}/{sys_id}")
        return {"success": True, "message": f"Record {sys_id} deleted from {table}"}
