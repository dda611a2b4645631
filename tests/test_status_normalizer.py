# tests/test_status_normalizer.py
from __future__ import annotations

import pytest

from functions.orchestrator.errors import (
    ConfigurationMissing,
    InvalidPayload,
    MalformedResponse,
    OracleUnreachable,
    Unauthenticated,
    UnknownAction,
)
from functions.orchestrator.status_normalizer import error_status_for, normalize_response_status


@pytest.mark.parametrize(
    "exc,expected",
    [
        (Unauthenticated("x"), 401),
        (InvalidPayload("x"), 400),
        (UnknownAction("x"), 400),
        (OracleUnreachable("x"), 502),
        (MalformedResponse("x"), 502),
        (ConfigurationMissing("x"), 500),
        (RuntimeError("x"), 500),
    ],
)
def test_error_status_for_maps_taxonomy(exc: Exception, expected: int) -> None:
    http_status, code = error_status_for(exc)

    assert http_status == expected
    assert code


def test_normalize_response_status() -> None:
    assert normalize_response_status(200) == "success"
    assert normalize_response_status(302) == "success"
    assert normalize_response_status(400) == "error"
    assert normalize_response_status(502) == "error"
