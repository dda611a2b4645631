"""
functions/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
Runtime configuration of the Resume Tailoring API: one pydantic-settings
model, filled from two layers.

    parameters/parameters.yaml    committed defaults
    RESUME_AI_* env variables     deployment overrides (win over YAML)

Both layers are merged once per process by get_settings(); everything
else in the codebase receives the resulting Settings object.

SECRETS
-------
supabase_anon_key and google_genai_api_key come from the environment
only. They may be absent at boot (health checks still answer); the code
path that needs one calls require_secret() and fails that request with
ConfigurationMissing.

Nothing in here performs HTTP calls or knows about requests.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional, Set

import structlog
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from functions.orchestrator.errors import ConfigurationMissing
from functions.utils.yaml_loader import PARAMETERS_DIR, load_yaml_mapping

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = PARAMETERS_DIR / "parameters.yaml"


class Settings(BaseSettings):
    """
    All tunables of the service.

    Field defaults apply when neither YAML nor env mention a field.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESUME_AI_",
        extra="ignore",
    )

    # Identity of this deployment (health output, log context)
    service_name: str = "resume_tailoring_api"
    environment: str = "local"
    log_level: str = "INFO"

    # Session provider (Supabase auth)
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Generative oracle (Gemini)
    google_genai_api_key: Optional[str] = None
    gemini_model: str = "gemini-3-flash-preview"
    thinking_budget: int = 32768

    # Session verification HTTP behaviour; retries cover transport errors / 5xx
    http_timeout_seconds: float = 15.0
    auth_max_retries: int = 1

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Containers whose inner keys leave the API untouched (GitHub repo objects)
    preserve_container_keys: Set[str] = Field(default_factory=lambda: {"github_projects"})

    # Attach MergeReport to responses under `diagnostics`
    enable_debug_metadata: bool = False

    def require_secret(self, name: str) -> str:
        """Value of a secret field, or ConfigurationMissing naming its env variable."""
        value = getattr(self, name, None)
        if isinstance(value, str) and value.strip():
            return value.strip()

        logger.error("settings_secret_missing", setting=name)
        raise ConfigurationMissing(
            f"{name} is missing. Set RESUME_AI_{name.upper()} in the function environment."
        )


@lru_cache(maxsize=1)
def _load_yaml_parameters() -> Dict[str, Any]:
    return load_yaml_mapping(PARAMETERS_PATH, kind="parameters")


def _env_overrides() -> Dict[str, Any]:
    """Only the fields actually set through RESUME_AI_* variables."""
    try:
        return Settings().model_dump(exclude_unset=True)
    except ValidationError as exc:
        logger.warning("settings_env_invalid", errors=exc.errors())
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    overrides = _env_overrides()
    settings = Settings.model_validate({**_load_yaml_parameters(), **overrides})

    logger.info(
        "settings_loaded",
        environment=settings.environment,
        service_name=settings.service_name,
        env_overrides=sorted(overrides),
        gemini_model=settings.gemini_model,
        thinking_budget=settings.thinking_budget,
        supabase_url_present=bool(settings.supabase_url),
        supabase_anon_key_present=bool(settings.supabase_anon_key),
        google_genai_api_key_present=bool(settings.google_genai_api_key),
        enable_debug_metadata=settings.enable_debug_metadata,
    )
    return settings
