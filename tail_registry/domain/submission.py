from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from tail_registry.domain.challenge import Challenge
from tail_registry.domain.contracts import RegistryClient
from tail_registry.domain.error_taxonomy import (
    DUPLICATE_SUBMISSION_MESSAGE,
    INVALID_IDENTIFIER_MESSAGE,
    ErrorCode,
)
from tail_registry.domain.errors import DomainDependencyError, IdentifierDecodeError, SubmissionNotReadyError
from tail_registry.domain.identifier import decode_launcher_id
from tail_registry.domain.validation import OPTIONAL_URL_FIELDS, TailFields

logger = logging.getLogger("tail_registry")


class SubmissionStatus(StrEnum):
    SUBMITTED = "submitted"
    INVALID_IDENTIFIER = "invalid_identifier"
    REJECTED = "rejected"
    DUPLICATE_PENDING = "duplicate_pending"
    TRANSPORT_FAILED = "transport_failed"


_STATUS_ERROR_CODES: dict[SubmissionStatus, ErrorCode] = {
    SubmissionStatus.INVALID_IDENTIFIER: "invalid_identifier",
    SubmissionStatus.REJECTED: "submission_rejected",
    SubmissionStatus.DUPLICATE_PENDING: "submission_duplicate",
    SubmissionStatus.TRANSPORT_FAILED: "submission_transport_failed",
}


@dataclass(frozen=True)
class SubmissionRecord:
    hash: str
    name: str
    code: str
    category: str
    description: str
    launcher_id: str
    eve_coin_id: str
    website_url: str | None = None
    twitter_url: str | None = None
    discord_url: str | None = None


@dataclass(frozen=True)
class SignedSubmission:
    record: SubmissionRecord
    signature: str


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    message: str = ""
    tx_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is SubmissionStatus.SUBMITTED

    @property
    def error_code(self) -> ErrorCode | None:
        return _STATUS_ERROR_CODES.get(self.status)


def build_submission_record(fields: TailFields, *, launcher_id: str) -> SubmissionRecord:
    return SubmissionRecord(
        hash=fields.hash,
        name=fields.name,
        code=fields.code,
        category=fields.category.value,
        description=fields.description,
        launcher_id=launcher_id,
        eve_coin_id=fields.coin,
        website_url=fields.website_url,
        twitter_url=fields.twitter_url,
        discord_url=fields.discord_url,
    )


def submission_body(record: SubmissionRecord) -> dict[str, str]:
    body = {
        "hash": record.hash,
        "name": record.name,
        "code": record.code,
        "category": record.category,
        "description": record.description,
        "launcherId": record.launcher_id,
        "eveCoinId": record.eve_coin_id,
    }
    # Optional links are omitted entirely when empty.
    for key in OPTIONAL_URL_FIELDS:
        value = getattr(record, key)
        if value:
            body[key] = value
    return body


@dataclass
class SubmissionAssembler:
    registry: RegistryClient

    async def submit(
        self,
        fields: TailFields,
        challenge: Challenge | None,
        signature: str,
    ) -> SubmissionOutcome:
        if challenge is None:
            raise SubmissionNotReadyError("no signing challenge is available for this asset")
        if not signature.strip():
            raise SubmissionNotReadyError("signature is required")

        try:
            launcher_id = decode_launcher_id(fields.logo)
        except IdentifierDecodeError as exc:
            logger.info("nft id rejected: %s", exc, extra={"asset_hash": fields.hash})
            return SubmissionOutcome(
                status=SubmissionStatus.INVALID_IDENTIFIER,
                message=INVALID_IDENTIFIER_MESSAGE,
            )

        signed = SignedSubmission(
            record=build_submission_record(fields, launcher_id=launcher_id),
            signature=signature,
        )
        outcome = await self._send(signed)
        logger.info(
            "tail submission finished",
            extra={"asset_hash": fields.hash, "outcome": outcome.status.value},
        )
        return outcome

    async def _send(self, signed: SignedSubmission) -> SubmissionOutcome:
        try:
            response = await self.registry.submit_tail(
                body=submission_body(signed.record),
                signature=signed.signature,
            )
        except DomainDependencyError as exc:
            return SubmissionOutcome(
                status=SubmissionStatus.TRANSPORT_FAILED,
                message=str(exc) or exc.__class__.__name__,
            )

        if response.tx_id:
            return SubmissionOutcome(status=SubmissionStatus.SUBMITTED, tx_id=response.tx_id)
        if response.error:
            return SubmissionOutcome(status=SubmissionStatus.REJECTED, message=response.error)
        return SubmissionOutcome(
            status=SubmissionStatus.DUPLICATE_PENDING,
            message=DUPLICATE_SUBMISSION_MESSAGE,
        )
