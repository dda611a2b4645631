"""
functions/orchestrator/session_verifier.py

WHAT THIS FILE IS FOR
---------------------
This module delegates caller authentication to the session provider
(Supabase auth). The service never issues or stores credentials; it only
requires a verified identity before any model call is made.

It exists to:
- Extract the session token (Authorization header first, body fallback)
- Read the verification endpoint template from parameters/config.yaml
- Perform an async HTTP GET against the provider with retries
- Add structured logging for observability
- Translate every failure into Unauthenticated / ConfigurationMissing

RETRY POLICY
------------
- Transport errors and 5xx responses are retried (auth_max_retries)
- 401 / 403 / any other 4xx is a definitive "invalid session"
- Exhausted retries surface as Unauthenticated (identity not proven)

CONFIGURATION
-------------
- Endpoint path is defined in: parameters/config.yaml (session_provider.endpoints.user)
- Provider URL, anon key, timeout and retry count come from Settings
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
import structlog

from functions.orchestrator.errors import ConfigurationMissing, Unauthenticated
from functions.utils.settings import Settings
from functions.utils.yaml_loader import PARAMETERS_DIR, load_yaml_mapping

logger = structlog.get_logger(__name__)

CONFIG_PATH = PARAMETERS_DIR / "config.yaml"

BEARER_PREFIX = "Bearer "
DEFAULT_USER_ENDPOINT = "/auth/v1/user"


@lru_cache(maxsize=1)
def load_endpoint_config() -> Dict[str, Any]:
    return load_yaml_mapping(CONFIG_PATH, kind="endpoint_config")


def extract_token(authorization: Optional[str], body_token: Optional[str]) -> str:
    """
    Authorization: Bearer <token> wins; the body's access_token is a fallback
    for clients that cannot set headers.
    """
    if authorization and authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip()
        if token:
            return token

    if body_token and body_token.strip():
        logger.info("session_token_from_body")
        return body_token.strip()

    logger.warning("session_token_missing")
    raise Unauthenticated("Missing Authorization header or token")


@dataclass(frozen=True)
class VerifiedUser:
    id: str
    email: Optional[str] = None


class SessionVerifier:
    """
    Thin async client around the session provider's "who am I" endpoint.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._config = load_endpoint_config()
        self._timeout = settings.http_timeout_seconds
        self._max_retries = max(settings.auth_max_retries, 0)

    async def verify(self, token: str) -> VerifiedUser:
        base_url = self.settings.require_secret("supabase_url").rstrip("/")
        anon_key = self.settings.require_secret("supabase_anon_key")

        url = base_url + self._get_endpoint_template(key="user")
        headers = {
            "apikey": anon_key,
            "Authorization": f"{BEARER_PREFIX}{token}",
        }

        body = await self._get_user(url, headers)

        user_id = body.get("id")
        if not isinstance(user_id, str) or not user_id:
            logger.warning("session_user_missing", url=url)
            raise Unauthenticated("Unauthorized: Invalid session")

        email = body.get("email") if isinstance(body.get("email"), str) else None
        logger.info("session_verified", user_id=user_id)
        return VerifiedUser(id=user_id, email=email)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _get_endpoint_template(self, key: str) -> str:
        """
        Read an endpoint path from the loaded config.

        Example:
            key="user" -> "/auth/v1/user"
        """
        endpoints = self._config.get("session_provider", {}).get("endpoints", {})
        template = endpoints.get(key, DEFAULT_USER_ENDPOINT if key == "user" else None)
        if not isinstance(template, str) or not template.startswith("/"):
            logger.error("endpoint_template_missing_or_invalid", section="session_provider", key=key)
            raise ConfigurationMissing(f"Missing or invalid endpoint template for session_provider.{key}")
        return template

    async def _get_user(self, url: str, headers: Dict[str, str]) -> Dict[str, Any]:
        """
        GET the provider's user endpoint.

        - Retries: auth_max_retries=1 => attempts=2 (transport errors / 5xx only)
        - Raises: Unauthenticated on rejection or exhaustion
        """
        attempts = self._max_retries + 1

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            for attempt in range(1, attempts + 1):
                try:
                    resp = await client.get(url, headers=headers)
                except httpx.RequestError as exc:
                    logger.warning(
                        "session_verify_attempt_failed",
                        url=url,
                        attempt=attempt,
                        max_retries=self._max_retries,
                        error=str(exc),
                    )
                    if attempt >= attempts:
                        logger.error("session_verify_exhausted_retries", url=url, attempts=attempt)
                        raise Unauthenticated("Unauthorized: Session provider unreachable") from exc
                    continue

                if resp.status_code >= 500:
                    logger.warning(
                        "session_verify_http_error",
                        url=url,
                        attempt=attempt,
                        status_code=resp.status_code,
                        response_snippet=(resp.text or "")[:500],
                    )
                    if attempt >= attempts:
                        logger.error("session_verify_exhausted_retries", url=url, attempts=attempt)
                        raise Unauthenticated("Unauthorized: Session provider unavailable")
                    continue

                if resp.status_code >= 400:
                    logger.warning("session_rejected", url=url, status_code=resp.status_code)
                    raise Unauthenticated("Unauthorized: Invalid session")

                try:
                    data = resp.json()
                except ValueError as exc:
                    logger.warning("session_response_not_json", url=url)
                    raise Unauthenticated("Unauthorized: Invalid session") from exc

                return data if isinstance(data, dict) else {}

        raise Unauthenticated("Unauthorized: Invalid session")
