# src/nearshop/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/nearshop/config/defaults.yaml` (or the file named by
`NEARSHOP_CONFIG_PATH`), then a short whitelist of environment variables is laid
on top (see `ENV_OVERRIDES`). A repo-local `.env` is loaded first so the maps
API key does not have to be exported by hand.

Design rule:
- Tuning knobs (debounce window, locale, endpoints) live in YAML, not hard-coded in logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from typing import Any, Callable

import yaml
from pydantic import BaseModel, Field

from nearshop.core.env import load_dotenv_if_present, resolve_project_path


class AppSettings(BaseModel):
    name: str = "nearshop"
    http_timeout_seconds: float = Field(15, gt=0)
    log_level: str = "INFO"


class ProviderSettings(BaseModel):
    """Google Maps web-service endpoints and request locale."""

    autocomplete_url: str = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
    place_details_url: str = "https://maps.googleapis.com/maps/api/place/details/json"
    reverse_geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    api_key: str | None = None
    language_code: str = "es"
    country_filter: str = "country:ar"


class SearchSettings(BaseModel):
    debounce_ms: int = Field(500, ge=0)
    min_query_length: int = Field(3, ge=1)
    # Fill a missing province/city after place details with a reverse geocode.
    enrich_place_details: bool = True


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class MapSettings(BaseModel):
    enabled: bool = True
    default_center: LatLng = Field(default_factory=lambda: LatLng(lat=-32.4827, lng=-58.2363))
    region_delta: float = Field(0.01, gt=0)
    unavailable_message: str = "The map picker needs a native build of the app."


class DirectorySettings(BaseModel):
    base_url: str = "http://localhost:3000/api"
    page_size: int = Field(10, ge=1, le=100)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    directory: DirectorySettings = Field(default_factory=DirectorySettings)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


# (env var, (section, key), converter)
ENV_OVERRIDES: tuple[tuple[str, tuple[str, str], Callable[[str], Any]], ...] = (
    ("NEARSHOP_LOG_LEVEL", ("app", "log_level"), str),
    ("GOOGLE_MAPS_API_KEY", ("provider", "api_key"), str),
    ("NEARSHOP_DIRECTORY_URL", ("directory", "base_url"), str),
    ("NEARSHOP_MAP_ENABLED", ("map", "enabled"), _parse_bool),
)


def _yaml_mapping(text: str, *, source: str) -> dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {source}; expected a mapping.")
    return data


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `nearshop.config`."""
    text = resources.files("nearshop.config").joinpath(filename).read_text(encoding="utf-8")
    return _yaml_mapping(text, source=filename)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay the whitelisted environment variables onto the raw YAML payload.

    Empty values are ignored, so `GOOGLE_MAPS_API_KEY=` does not blank a key set in YAML.
    """
    data = {section: dict(values or {}) for section, values in data.items()}
    for env_var, (section, key), convert in ENV_OVERRIDES:
        value = os.getenv(env_var)
        if value:
            data.setdefault(section, {})[key] = convert(value)
    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("NEARSHOP_CONFIG_PATH")
    if config_path:
        path = resolve_project_path(config_path)
        raw = _yaml_mapping(path.read_text(encoding="utf-8"), source=str(path))
    else:
        raw = _read_package_yaml("defaults.yaml")
    return Settings.model_validate(_apply_env_overrides(raw))


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
