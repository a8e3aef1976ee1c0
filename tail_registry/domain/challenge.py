from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum

from tail_registry.domain.contracts import AuthorizationClient
from tail_registry.domain.errors import DomainDependencyError

logger = logging.getLogger("tail_registry")

KEY_COMPONENT_LENGTH = 64

# Form field name -> ChallengeKey attribute.
WATCHED_FIELDS: dict[str, str] = {
    "hash": "asset_hash",
    "coin": "coin_id",
}


class ChallengePhase(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"


@dataclass(frozen=True)
class ChallengeKey:
    asset_hash: str = ""
    coin_id: str = ""

    @property
    def complete(self) -> bool:
        return len(self.asset_hash) == KEY_COMPONENT_LENGTH and len(self.coin_id) == KEY_COMPONENT_LENGTH


@dataclass(frozen=True)
class Challenge:
    signing_address: str
    message_to_sign: str


@dataclass(frozen=True)
class ChallengeState:
    phase: ChallengePhase = ChallengePhase.IDLE
    key: ChallengeKey = field(default_factory=ChallengeKey)
    challenge: Challenge | None = None
    error: str | None = None


class ChallengeCoordinator:
    """Keeps the signing challenge in step with the hash and coin fields.

    Every edit of a watched field recomputes the effective key. A key that is
    not complete drops back to idle and forgets any challenge. A new complete
    key starts exactly one fetch; when a fetch resolves its result is applied
    only if it was issued for the latest key, so a slow answer for an older
    key can never overwrite a newer one.

    Fetches run as tasks on the running event loop; ``handle_edit`` must be
    called from inside it.
    """

    def __init__(self, *, client: AuthorizationClient, session_id: str | None = None) -> None:
        self._client = client
        self._session_id = session_id
        self._state = ChallengeState()
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> ChallengeState:
        return self._state

    @property
    def ready_challenge(self) -> Challenge | None:
        if self._state.phase is ChallengePhase.READY:
            return self._state.challenge
        return None

    def handle_edit(self, field_name: str, value: str) -> None:
        attribute = WATCHED_FIELDS.get(field_name)
        if attribute is None:
            return
        component = value if len(value) == KEY_COMPONENT_LENGTH else ""
        self._apply_key(replace(self._state.key, **{attribute: component}))

    async def settle(self) -> None:
        """Wait until no fetch is outstanding."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def _apply_key(self, key: ChallengeKey) -> None:
        if key == self._state.key:
            return

        self._generation += 1
        if not key.complete:
            self._state = ChallengeState(phase=ChallengePhase.IDLE, key=key)
            return

        self._state = ChallengeState(phase=ChallengePhase.FETCHING, key=key)
        task = asyncio.get_running_loop().create_task(self._fetch(key=key, generation=self._generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, *, key: ChallengeKey, generation: int) -> bool:
        return generation == self._generation and key == self._state.key

    async def _fetch(self, *, key: ChallengeKey, generation: int) -> None:
        extra = {"session_id": self._session_id, "asset_hash": key.asset_hash}
        logger.info("challenge fetch started", extra=extra)
        try:
            response = await self._client.fetch_challenge(asset_hash=key.asset_hash, coin_id=key.coin_id)
        except Exception as exc:
            if not self._is_current(key=key, generation=generation):
                logger.info("stale challenge failure discarded", extra=extra)
                return
            # Anything the client raises ends the fetch; only domain failures are expected.
            logger.warning(
                "challenge fetch failed",
                extra=extra,
                exc_info=not isinstance(exc, DomainDependencyError),
            )
            self._state = ChallengeState(
                phase=ChallengePhase.READY,
                key=key,
                error=str(exc) or exc.__class__.__name__,
            )
            return

        if not self._is_current(key=key, generation=generation):
            logger.info("stale challenge result discarded", extra=extra)
            return

        challenge = None
        if response.address and response.message:
            challenge = Challenge(signing_address=response.address, message_to_sign=response.message)
        self._state = ChallengeState(phase=ChallengePhase.READY, key=key, challenge=challenge)
