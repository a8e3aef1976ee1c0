from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

# Canonical error vocabulary for the registration flow.
ErrorCode = Literal[
    "validation_error",
    "invalid_identifier",
    "challenge_fetch_failed",
    "submission_rejected",
    "submission_duplicate",
    "submission_transport_failed",
]

# Every error is recovered locally; this says which user action clears it.
RecoveryAction = Literal["edit", "resubmit"]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "validation_error",
    "invalid_identifier",
    "challenge_fetch_failed",
    "submission_rejected",
    "submission_duplicate",
    "submission_transport_failed",
)

RECOVERY_ACTIONS: Mapping[ErrorCode, RecoveryAction] = {
    "validation_error": "edit",
    "invalid_identifier": "edit",
    "challenge_fetch_failed": "edit",
    "submission_rejected": "resubmit",
    "submission_duplicate": "resubmit",
    "submission_transport_failed": "resubmit",
}

# Errors that keep the submit action closed until the user edits the form.
BLOCKING_ERROR_CODES: frozenset[ErrorCode] = frozenset(
    {
        "validation_error",
        "invalid_identifier",
    }
)

INVALID_IDENTIFIER_MESSAGE = "Invalid NFT ID"
DUPLICATE_SUBMISSION_MESSAGE = (
    "Failed to submit TAIL record to mempool. You can only submit the same TAIL hash once. "
    "If you recently submitted a record you must wait for it to clear before submitting another."
)


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def recovery_action(code: ErrorCode) -> RecoveryAction:
    return RECOVERY_ACTIONS[code]


def is_blocking(code: ErrorCode) -> bool:
    return code in BLOCKING_ERROR_CODES
