# tests/test_settings.py
from __future__ import annotations

from pathlib import Path

import pytest

import functions.utils.settings as settings_mod
from functions.orchestrator.errors import ConfigurationMissing


@pytest.fixture
def fresh_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    yaml_path = tmp_path / "parameters.yaml"
    yaml_path.write_text(
        "environment: staging\nthinking_budget: 2048\nenable_debug_metadata: true\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(settings_mod, "PARAMETERS_PATH", yaml_path)
    settings_mod._load_yaml_parameters.cache_clear()
    settings_mod.get_settings.cache_clear()
    yield
    settings_mod._load_yaml_parameters.cache_clear()
    settings_mod.get_settings.cache_clear()


def test_yaml_defaults_are_loaded(fresh_settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RESUME_AI_ENVIRONMENT", raising=False)
    monkeypatch.delenv("RESUME_AI_THINKING_BUDGET", raising=False)

    s = settings_mod.get_settings()

    assert s.environment == "staging"
    assert s.thinking_budget == 2048
    assert s.enable_debug_metadata is True


def test_env_overrides_yaml(fresh_settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESUME_AI_ENVIRONMENT", "production")
    monkeypatch.setenv("RESUME_AI_GOOGLE_GENAI_API_KEY", "from-env")

    s = settings_mod.get_settings()

    assert s.environment == "production"
    assert s.require_secret("google_genai_api_key") == "from-env"


def test_missing_yaml_falls_back_to_field_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(settings_mod, "PARAMETERS_PATH", tmp_path / "absent.yaml")
    settings_mod._load_yaml_parameters.cache_clear()

    assert settings_mod._load_yaml_parameters() == {}
    settings_mod._load_yaml_parameters.cache_clear()


@pytest.mark.parametrize("value", [None, "", "   "])
def test_require_secret_raises_configuration_missing(value) -> None:
    s = settings_mod.Settings(supabase_anon_key=value)

    with pytest.raises(ConfigurationMissing) as excinfo:
        s.require_secret("supabase_anon_key")

    assert "RESUME_AI_SUPABASE_ANON_KEY" in excinfo.value.message
