"""Settings resolution with named profile support."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "ebrain" / "config.toml"


class BrainSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Redmine
    redmine_url: str = "http://localhost/redmine"
    redmine_api_key: SecretStr = SecretStr("")

    # ServiceNow: instance short-name ("acme") or full URL
    snow_instance: str = ""
    snow_user: str | None = None
    snow_pass: SecretStr | None = None
    snow_token: SecretStr | None = None  # wins over user/pass when set

    # Agent
    openai_model: str = "gpt-4o"

    debug: bool = Field(default=False, validation_alias="brain_debug")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Profile values arrive as init kwargs; env and .env override them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/ebrain/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def resolve_profile(profile: str | None = None) -> str | None:
    """Return the active profile name.

    Precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. BRAIN_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/ebrain/config.toml
    4. First profile defined in ~/.config/ebrain/config.toml
    """
    toml_config = _load_toml()
    return (
        profile
        or os.environ.get("BRAIN_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )


def get_settings(profile: str | None = None) -> BrainSettings:
    """Return BrainSettings for the active profile, with env vars layered on top."""
    toml_config = _load_toml()
    active = resolve_profile(profile)

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}", err=True)
            raise typer.Exit(1)

    return BrainSettings(**profile_defaults)
