from __future__ import annotations

from tail_registry.api.handlers.deps import ApiDeps
from tail_registry.api.schemas import (
    ChallengeStateResponse,
    DeleteSessionResponse,
    FieldErrorResponse,
    SessionResponse,
    SubmissionOutcomeResponse,
)
from tail_registry.domain.ids import new_session_id
from tail_registry.domain.submission import SubmissionOutcome
from tail_registry.services.form_session import FormSession

COMPONENT_ID = "api.sessions"


async def create_session_handler(
    *,
    fields: dict[str, str],
    wait_for_challenge: bool,
    api_deps: ApiDeps,
) -> SessionResponse:
    session = FormSession.open(
        session_id=new_session_id(),
        authorization=api_deps.authorization,
        registry=api_deps.registry,
    )
    api_deps.sessions[session.session_id] = session
    if fields:
        session.apply_edits(fields)
    if wait_for_challenge:
        await session.coordinator.settle()
    return session_response(session)


async def update_fields_handler(
    *,
    session: FormSession,
    fields: dict[str, str],
    wait_for_challenge: bool,
) -> SessionResponse:
    session.apply_edits(fields)
    if wait_for_challenge:
        await session.coordinator.settle()
    return session_response(session)


def outcome_response(outcome: SubmissionOutcome) -> SubmissionOutcomeResponse:
    return SubmissionOutcomeResponse(
        status=outcome.status,
        message=outcome.message,
        tx_id=outcome.tx_id,
        error_code=outcome.error_code,
    )


def session_response(session: FormSession) -> SessionResponse:
    state = session.coordinator.state
    challenge = state.challenge
    return SessionResponse(
        session_id=session.session_id,
        fields=dict(session.fields),
        errors=[FieldErrorResponse(field=error.field, message=error.message) for error in session.errors],
        challenge=ChallengeStateResponse(
            phase=state.phase,
            signing_address=challenge.signing_address if challenge is not None else None,
            message_to_sign=challenge.message_to_sign if challenge is not None else None,
            error=state.error,
        ),
        can_submit=session.can_submit,
        inserted=session.inserted,
        last_outcome=outcome_response(session.last_outcome) if session.last_outcome is not None else None,
    )


async def delete_session_handler(*, session_id: str, api_deps: ApiDeps) -> DeleteSessionResponse | None:
    session = api_deps.sessions.get(session_id)
    if session is None:
        return None
    # Outstanding fetches finish before the session is dropped.
    await session.coordinator.settle()
    api_deps.sessions.pop(session_id, None)
    return DeleteSessionResponse(session_id=session_id, deleted=True)
