from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChallengeResponse:
    address: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class SubmitTailResponse:
    tx_id: str | None = None
    error: str | None = None
