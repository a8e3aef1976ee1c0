from __future__ import annotations

from dataclasses import dataclass, field

from tail_registry.domain.dto import ChallengeResponse, SubmitTailResponse
from tail_registry.domain.errors import ChallengeFetchError, DomainDependencyError


@dataclass
class StubAuthorizationClient:
    challenges: dict[tuple[str, str], ChallengeResponse] = field(default_factory=dict)
    failures: dict[tuple[str, str], str] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def fetch_challenge(self, *, asset_hash: str, coin_id: str) -> ChallengeResponse:
        key = (asset_hash, coin_id)
        self.calls.append(key)
        failure = self.failures.get(key)
        if failure is not None:
            raise ChallengeFetchError(failure)
        # Unknown pairs have nothing to sign yet.
        return self.challenges.get(key, ChallengeResponse())


@dataclass
class StubRegistryClient:
    response: SubmitTailResponse = field(default_factory=lambda: SubmitTailResponse(tx_id="0xstub"))
    failure: str | None = None
    submissions: list[tuple[dict[str, str], str]] = field(default_factory=list)

    async def submit_tail(self, *, body: dict[str, str], signature: str) -> SubmitTailResponse:
        self.submissions.append((dict(body), signature))
        if self.failure is not None:
            raise DomainDependencyError(self.failure)
        return self.response


@dataclass
class StubWalletSession:
    account_ids: list[str] = field(default_factory=list)

    def accounts(self) -> list[str]:
        return list(self.account_ids)
