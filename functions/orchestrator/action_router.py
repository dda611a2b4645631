"""
functions/orchestrator/action_router.py

Dispatches an action name to one of the four use-cases.

- The payload is validated against the action's input model first;
  failures surface as InvalidPayload with field paths.
- Unknown action names fail immediately with UnknownAction.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple, Type

import structlog
from pydantic import BaseModel, ValidationError

from functions.orchestrator.errors import InvalidPayload, UnknownAction
from functions.orchestrator.resume_workflow_service import ResumeWorkflowService
from schemas.input_schema import (
    CondenseCoverLetterPayload,
    CondenseResumePayload,
    ParseResumePayload,
    TailorResumePayload,
)

logger = structlog.get_logger(__name__)

PARSE_RESUME = "parseResume"
TAILOR_RESUME = "tailorResume"
CONDENSE_RESUME = "condenseResume"
CONDENSE_COVER_LETTER = "condenseCoverLetter"


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(x) for x in err.get("loc", [])) or "payload"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts)


class ActionRouter:
    def __init__(self, service: ResumeWorkflowService):
        self.service = service
        self._routes: Dict[str, Tuple[Type[BaseModel], Callable[[Any], BaseModel]]] = {
            PARSE_RESUME: (ParseResumePayload, service.parse_resume),
            TAILOR_RESUME: (TailorResumePayload, service.tailor_resume),
            CONDENSE_RESUME: (CondenseResumePayload, service.condense_resume),
            CONDENSE_COVER_LETTER: (CondenseCoverLetterPayload, service.condense_cover_letter),
        }

    @property
    def actions(self) -> Tuple[str, ...]:
        return tuple(self._routes)

    def dispatch(self, action: str, payload: Dict[str, Any]) -> BaseModel:
        route = self._routes.get(action)
        if route is None:
            logger.warning("unknown_action", action=action)
            raise UnknownAction(f"Unknown action: {action}")

        payload_model, handler = route
        try:
            parsed = payload_model.model_validate(payload)
        except ValidationError as exc:
            logger.info("action_payload_invalid", action=action, error_count=exc.error_count())
            raise InvalidPayload(f"Invalid payload for {action}: {_format_validation_error(exc)}") from exc

        logger.info("action_dispatched", action=action)
        return handler(parsed)
