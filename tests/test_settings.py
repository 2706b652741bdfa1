from __future__ import annotations

# We use pytest because the repository already standardizes on it for automated checks.
import pytest

# We test the cached loader directly, so every test clears the cache around itself.
from nearshop.config.settings import Settings, get_settings
from nearshop.search.capability import MapCapable, MapUnavailable, select_map_capability


@pytest.fixture
def fresh_settings():
    # `get_settings()` is an lru_cache; clear it so env changes in this test are visible.
    get_settings.cache_clear()
    yield
    # Clear again so later tests do not see this test's environment.
    get_settings.cache_clear()


def test_packaged_defaults_load(monkeypatch, fresh_settings):
    # Point away from any developer override file so we read the packaged YAML.
    monkeypatch.delenv("NEARSHOP_CONFIG_PATH", raising=False)

    settings = get_settings()

    # The search knobs drive the debounce state machine, so their defaults matter.
    assert settings.search.debounce_ms == 500
    assert settings.search.min_query_length == 3
    assert settings.provider.autocomplete_url.startswith("https://maps.googleapis.com/")
    assert settings.map.default_center.lat == pytest.approx(-32.4827)


def test_env_overrides_are_applied(monkeypatch, fresh_settings):
    # Only a small whitelist of env vars is honored; these are the ones operators set.
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "env-key")
    monkeypatch.setenv("NEARSHOP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("NEARSHOP_DIRECTORY_URL", "https://shops.example.test/api")
    monkeypatch.setenv("NEARSHOP_MAP_ENABLED", "false")

    settings = get_settings()

    assert settings.provider.api_key == "env-key"
    assert settings.app.log_level == "DEBUG"
    assert settings.directory.base_url == "https://shops.example.test/api"
    assert settings.map.enabled is False


def test_external_config_file_replaces_packaged_defaults(monkeypatch, tmp_path, fresh_settings):
    # A partial YAML file is enough; missing sections fall back to model defaults.
    config = tmp_path / "nearshop.yaml"
    config.write_text("search:\n  debounce_ms: 250\n", encoding="utf-8")
    monkeypatch.setenv("NEARSHOP_CONFIG_PATH", str(config))

    settings = get_settings()

    assert settings.search.debounce_ms == 250
    assert settings.search.min_query_length == 3


def test_invalid_knobs_are_rejected():
    # Pydantic guards the tuning knobs: a zero-length minimum would search on every keystroke.
    with pytest.raises(ValueError, match="min_query_length"):
        Settings.model_validate({"search": {"min_query_length": 0}})


def test_map_capability_is_selected_from_configuration():
    settings = Settings()

    capable = select_map_capability(settings)
    assert isinstance(capable, MapCapable)
    assert capable.available is True

    disabled = settings.model_copy(
        update={"map": settings.map.model_copy(update={"enabled": False, "unavailable_message": "web build"})}
    )
    unavailable = select_map_capability(disabled)
    assert isinstance(unavailable, MapUnavailable)
    assert unavailable.available is False
    assert unavailable.reason == "web build"
