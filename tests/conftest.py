"""Shared test fixtures."""

from collections.abc import Iterator

import pytest

from ebrain.providers.redmine import RedmineProvider
from ebrain.providers.servicenow import ServiceNowProvider
from ebrain.tools import Clients, Registry


REDMINE_URL = "https://redmine.example.com"

_ENV_VARS = (
    "REDMINE_URL",
    "REDMINE_API_KEY",
    "SNOW_INSTANCE",
    "SNOW_USER",
    "SNOW_PASS",
    "SNOW_TOKEN",
    "OPENAI_MODEL",
    "BRAIN_DEBUG",
    "DEBUG",
    "BRAIN_DEFAULT_PROFILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def redmine() -> Iterator[RedmineProvider]:
    provider = RedmineProvider(REDMINE_URL, "rm_test_key")
    yield provider
    provider.close()


@pytest.fixture
def servicenow() -> Iterator[ServiceNowProvider]:
    provider = ServiceNowProvider("acme", token="sn_test_token")
    yield provider
    provider.close()


@pytest.fixture
def clients(redmine: RedmineProvider, servicenow: ServiceNowProvider) -> Clients:
    return Clients(redmine=redmine, servicenow=servicenow)


@pytest.fixture
def registry(clients: Clients) -> Registry:
    return Registry(clients)
