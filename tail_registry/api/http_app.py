from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import Awaitable, Callable
import logging

from fastapi import FastAPI, HTTPException

from tail_registry.api.handlers.accounts import list_accounts_handler
from tail_registry.api.handlers.deps import ApiDeps
from tail_registry.api.handlers.sessions import (
    create_session_handler,
    delete_session_handler,
    session_response,
    update_fields_handler,
)
from tail_registry.api.handlers.submissions import submit_tail_handler
from tail_registry.api.schemas import (
    CreateSessionRequest,
    DeleteSessionResponse,
    ErrorResponse,
    HealthResponse,
    ListAccountsResponse,
    ReadyResponse,
    SessionResponse,
    SubmissionOutcomeResponse,
    SubmitRequest,
    UpdateFieldsRequest,
)
from tail_registry.domain.errors import DomainInvariantError
from tail_registry.services.form_session import FormSession


def build_app(
    role: str,
    run_id: str,
    api_deps: ApiDeps | None = None,
    on_startup: Callable[[], Awaitable[None]] | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    logger = logging.getLogger("runtime")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        del app
        logger.info(
            "role started",
            extra={"role": role, "service": role, "run_id": run_id},
        )

        if on_startup is not None:
            await on_startup()

        yield

        if api_deps is not None:
            for session in list(api_deps.sessions.values()):
                await session.coordinator.settle()

        if on_shutdown is not None:
            await on_shutdown()

        logger.info(
            "role stopped",
            extra={"role": role, "service": role, "run_id": run_id},
        )

    app = FastAPI(title="tail-registry", version="0.1.0", lifespan=lifespan)

    def _require_deps() -> ApiDeps:
        if api_deps is None:
            raise HTTPException(status_code=503, detail="api dependencies are not available")
        return api_deps

    def _require_session(session_id: str) -> FormSession:
        session = _require_deps().sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="session not found")
        return session

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        mode = "remote" if api_deps is not None and api_deps.settings.uses_remote_services else "stub"
        return HealthResponse(status="ok", role=role, mode=mode)

    @app.get("/ready", response_model=ReadyResponse, tags=["System"])
    async def ready() -> ReadyResponse:
        deps = _require_deps()
        return ReadyResponse(
            status="ready",
            role=role,
            mode="remote" if deps.settings.uses_remote_services else "stub",
            testnet=deps.settings.testnet,
            open_sessions=len(deps.sessions),
        )

    @app.get(
        "/accounts",
        response_model=ListAccountsResponse,
        responses={503: {"model": ErrorResponse}},
        tags=["Wallet"],
    )
    async def list_accounts() -> ListAccountsResponse:
        return await list_accounts_handler(api_deps=_require_deps())

    @app.post(
        "/sessions",
        response_model=SessionResponse,
        responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
        tags=["Sessions"],
    )
    async def create_session(request: CreateSessionRequest) -> SessionResponse:
        return await create_session_handler(
            fields=request.fields,
            wait_for_challenge=request.wait_for_challenge,
            api_deps=_require_deps(),
        )

    @app.get(
        "/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
    )
    async def get_session(session_id: str) -> SessionResponse:
        return session_response(_require_session(session_id))

    @app.patch(
        "/sessions/{session_id}/fields",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
        tags=["Sessions"],
    )
    async def update_fields(session_id: str, request: UpdateFieldsRequest) -> SessionResponse:
        return await update_fields_handler(
            session=_require_session(session_id),
            fields=request.fields,
            wait_for_challenge=request.wait_for_challenge,
        )

    @app.post(
        "/sessions/{session_id}/submit",
        response_model=SubmissionOutcomeResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
        tags=["Sessions"],
    )
    async def submit_tail(session_id: str, request: SubmitRequest) -> SubmissionOutcomeResponse:
        session = _require_session(session_id)
        try:
            return await submit_tail_handler(session=session, signature=request.signature)
        except DomainInvariantError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    @app.delete(
        "/sessions/{session_id}",
        response_model=DeleteSessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
    )
    async def delete_session(session_id: str) -> DeleteSessionResponse:
        deleted = await delete_session_handler(session_id=session_id, api_deps=_require_deps())
        if deleted is None:
            raise HTTPException(status_code=404, detail="session not found")
        return deleted

    return app
