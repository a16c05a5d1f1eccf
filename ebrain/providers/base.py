"""Shared HTTP plumbing for the REST providers."""

import logging
from typing import Any

import httpx

from ebrain.errors import RemoteNotFound, RemoteRequestFailure

logger = logging.getLogger(__name__)

TIMEOUT = 30


class RestProvider:
    """One configured httpx client per remote system; one request per call."""

    name = "remote"

    def __init__(self, base_url: str, headers: dict[str, str]) -> None:
        self.base_url = base_url
        self._client = httpx.Client(base_url=base_url, headers=headers, timeout=TIMEOUT)

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
    ) -> httpx.Response:
        logger.debug("%s %s %s%s params=%s", self.name, method, self.base_url, path, params)
        try:
            response = self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise RemoteRequestFailure(f"{self.name} request failed: {exc}") from exc

        if response.status_code == 401:
            raise RemoteRequestFailure(
                f"{self.name} API returned 401. Check the credentials for the active profile.",
                status_code=401,
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = response.status_code
            if status == 404:
                raise RemoteNotFound(f"{self.name}: {method} {path} not found", status_code=404) from exc
            raise RemoteRequestFailure(
                f"{self.name} API returned {status}: {response.text[:500]}",
                status_code=status,
            ) from exc
        return response

    def _json(self, response: httpx.Response) -> Any:
        # Redmine answers PUT with 204 and ServiceNow answers DELETE with an empty body.
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteRequestFailure(
                f"{self.name} returned a non-JSON body: {response.text[:200]}",
                status_code=response.status_code,
            ) from exc
