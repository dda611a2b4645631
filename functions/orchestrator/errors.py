"""
functions/orchestrator/errors.py

Error taxonomy for the Resume Tailoring API.

Every failure the service knows how to describe is a ResumeServiceError.
api.py turns them into a uniform `{"error": "<message>"}` response using
status_normalizer.error_status_for(); nothing here knows about HTTP.

Sparse-but-valid oracle output is NOT an error. It is absorbed by the
per-field fallbacks in merge_engine.py.
"""

from __future__ import annotations


class ResumeServiceError(Exception):
    """Base class for all handled failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(ResumeServiceError):
    """No identity proof, or the session provider rejected it."""


class ConfigurationMissing(ResumeServiceError):
    """A required secret or endpoint is not configured."""


class InvalidPayload(ResumeServiceError):
    """The action payload does not match the action's input contract."""


class UnknownAction(ResumeServiceError):
    """The action discriminator names no known use-case."""


class OracleError(ResumeServiceError):
    """Base class for failures talking to the generative model."""


class OracleUnreachable(OracleError):
    """Transport-level failure calling the model."""


class MalformedResponse(OracleError):
    """The model answered, but its text is not a JSON object."""
