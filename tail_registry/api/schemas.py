from __future__ import annotations

from pydantic import BaseModel, Field

from tail_registry.domain.challenge import ChallengePhase
from tail_registry.domain.submission import SubmissionStatus

SESSION_ID_PATTERN = r"^sess_[0-9A-HJKMNP-TV-Z]{26}$"


class ErrorResponse(BaseModel):
    detail: str


class HealthResponse(BaseModel):
    status: str
    role: str
    mode: str


class ReadyResponse(BaseModel):
    status: str
    role: str
    mode: str
    testnet: bool
    open_sessions: int


class AccountResponse(BaseModel):
    account_id: str
    chain_id: str
    address: str


class ListAccountsResponse(BaseModel):
    chains: list[str]
    items: list[AccountResponse]


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class ChallengeStateResponse(BaseModel):
    phase: ChallengePhase
    signing_address: str | None = None
    message_to_sign: str | None = None
    error: str | None = None


class SubmissionOutcomeResponse(BaseModel):
    status: SubmissionStatus
    message: str = ""
    tx_id: str | None = None
    error_code: str | None = None


class CreateSessionRequest(BaseModel):
    fields: dict[str, str] = Field(default_factory=dict)
    wait_for_challenge: bool = False


class UpdateFieldsRequest(BaseModel):
    # Applied in order, one edit per key.
    fields: dict[str, str] = Field(min_length=1)
    wait_for_challenge: bool = False


class SessionResponse(BaseModel):
    session_id: str = Field(pattern=SESSION_ID_PATTERN)
    fields: dict[str, str]
    errors: list[FieldErrorResponse]
    challenge: ChallengeStateResponse
    can_submit: bool
    inserted: bool
    last_outcome: SubmissionOutcomeResponse | None = None


class SubmitRequest(BaseModel):
    signature: str = Field(min_length=1)


class DeleteSessionResponse(BaseModel):
    session_id: str = Field(pattern=SESSION_ID_PATTERN)
    deleted: bool
