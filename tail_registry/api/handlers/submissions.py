from __future__ import annotations

from tail_registry.api.handlers.sessions import outcome_response
from tail_registry.api.schemas import SubmissionOutcomeResponse
from tail_registry.services.form_session import FormSession

COMPONENT_ID = "api.submit_tail"


async def submit_tail_handler(*, session: FormSession, signature: str) -> SubmissionOutcomeResponse:
    """Failure outcomes are regular responses; only a closed gate is an error."""
    outcome = await session.submit(signature)
    return outcome_response(outcome)
