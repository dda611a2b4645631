"""
functions/orchestrator/status_normalizer.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single canonical rule* for mapping the service
error taxonomy (functions/orchestrator/errors.py) onto the public HTTP
contract.

PUBLIC CONTRACT RULE
--------------------
    Unauthenticated       -> 401
    InvalidPayload        -> 400
    UnknownAction         -> 400
    OracleUnreachable     -> 502
    MalformedResponse     -> 502
    ConfigurationMissing  -> 500
    anything else         -> 500

The response body is always `{"error": "<message>"}`; the status code and
a stable error code (logged, not returned) are derived here.

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Build responses
- Log, raise, or handle exceptions

It performs **pure, deterministic mapping only**.
"""

from __future__ import annotations

from typing import Tuple

from functions.orchestrator.errors import (
    ConfigurationMissing,
    InvalidPayload,
    MalformedResponse,
    OracleUnreachable,
    Unauthenticated,
    UnknownAction,
)

_STATUS_TABLE: Tuple[Tuple[type, int, str], ...] = (
    (Unauthenticated, 401, "UNAUTHENTICATED"),
    (InvalidPayload, 400, "INVALID_PAYLOAD"),
    (UnknownAction, 400, "UNKNOWN_ACTION"),
    (OracleUnreachable, 502, "ORACLE_UNREACHABLE"),
    (MalformedResponse, 502, "MALFORMED_RESPONSE"),
    (ConfigurationMissing, 500, "CONFIGURATION_MISSING"),
)


def error_status_for(exc: BaseException) -> Tuple[int, str]:
    """
    Return (http_status, error_code) for an exception.

    Subclasses inherit their parent's mapping; unknown exceptions are 500.
    """
    for exc_type, http_status, code in _STATUS_TABLE:
        if isinstance(exc, exc_type):
            return http_status, code
    return 500, "INTERNAL_ERROR"


def normalize_response_status(http_status: int) -> str:
    """
    HTTP < 400  -> "success"
    HTTP >= 400 -> "error"
    """
    return "success" if http_status < 400 else "error"
