from __future__ import annotations

from typing import Protocol, runtime_checkable

from tail_registry.domain.dto import ChallengeResponse, SubmitTailResponse

SIGNATURE_HEADER = "x-chia-signature"


@runtime_checkable
class AuthorizationClient(Protocol):
    """Issues signing challenges for an (asset hash, coin id) pair.

    Implementations raise ChallengeFetchError on transport or service failure.
    An empty response means there is nothing to sign yet.
    """

    async def fetch_challenge(self, *, asset_hash: str, coin_id: str) -> ChallengeResponse: ...


@runtime_checkable
class RegistryClient(Protocol):
    """Submission boundary of the external registry.

    The signature is carried in the SIGNATURE_HEADER, never in the body.
    Transport failures raise DomainDependencyError.
    """

    async def submit_tail(self, *, body: dict[str, str], signature: str) -> SubmitTailResponse: ...


@runtime_checkable
class WalletSessionProvider(Protocol):
    def accounts(self) -> list[str]: ...
