from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import httpx
import pytest

from tail_registry.clients.http import HttpAuthorizationClient
from tail_registry.clients.stub import StubAuthorizationClient
from tail_registry.domain.challenge import Challenge, ChallengeCoordinator, ChallengeKey, ChallengePhase
from tail_registry.domain.dto import ChallengeResponse
from tests.tail_samples import ASSET_HASH, COIN_ID, OTHER_COIN_ID

SIGN_ME = ChallengeResponse(address="xch1signer", message="sign-me")


@dataclass
class _GatedAuthorizationClient:
    """Holds every fetch until the test opens the gate for its key."""

    responses: dict[tuple[str, str], ChallengeResponse] = field(default_factory=dict)
    gates: dict[tuple[str, str], asyncio.Event] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    def gate(self, key: tuple[str, str]) -> asyncio.Event:
        return self.gates.setdefault(key, asyncio.Event())

    async def fetch_challenge(self, *, asset_hash: str, coin_id: str) -> ChallengeResponse:
        key = (asset_hash, coin_id)
        self.calls.append(key)
        await self.gate(key).wait()
        return self.responses.get(key, ChallengeResponse())


async def _yield_to_tasks() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


@pytest.mark.unit
def test_challenge_key_completeness_requires_both_components() -> None:
    assert ChallengeKey(ASSET_HASH, COIN_ID).complete is True
    assert ChallengeKey(ASSET_HASH, "").complete is False
    assert ChallengeKey("a" * 63, COIN_ID).complete is False


@pytest.mark.unit
def test_complete_key_fetches_and_becomes_ready_with_challenge() -> None:
    client = StubAuthorizationClient(challenges={(ASSET_HASH, COIN_ID): SIGN_ME})

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        assert coordinator.state.phase is ChallengePhase.IDLE

        coordinator.handle_edit("coin", COIN_ID)
        assert coordinator.state.phase is ChallengePhase.FETCHING

        await coordinator.settle()
        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge == Challenge(signing_address="xch1signer", message_to_sign="sign-me")
        assert coordinator.state.error is None

    asyncio.run(_run())
    assert client.calls == [(ASSET_HASH, COIN_ID)]


@pytest.mark.unit
def test_empty_service_answer_is_ready_without_challenge_or_error() -> None:
    client = StubAuthorizationClient()

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()

        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge is None
        assert coordinator.state.error is None

    asyncio.run(_run())


@pytest.mark.unit
def test_address_without_message_is_not_a_challenge() -> None:
    client = StubAuthorizationClient(challenges={(ASSET_HASH, COIN_ID): ChallengeResponse(address="xch1signer")})

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()
        assert coordinator.ready_challenge is None

    asyncio.run(_run())


@pytest.mark.unit
@pytest.mark.parametrize("length", [0, 1, 63, 65])
def test_incomplete_key_never_fetches(length: int) -> None:
    client = StubAuthorizationClient()

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", "a" * length)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()
        assert coordinator.state.phase is ChallengePhase.IDLE

    asyncio.run(_run())
    assert client.calls == []


@pytest.mark.unit
def test_key_becoming_incomplete_clears_held_challenge() -> None:
    client = StubAuthorizationClient(challenges={(ASSET_HASH, COIN_ID): SIGN_ME})

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()
        assert coordinator.ready_challenge is not None

        coordinator.handle_edit("coin", COIN_ID[:-1])

        assert coordinator.state.phase is ChallengePhase.IDLE
        assert coordinator.state.challenge is None
        assert coordinator.ready_challenge is None

    asyncio.run(_run())


@pytest.mark.unit
def test_same_key_is_fetched_once() -> None:
    client = _GatedAuthorizationClient(responses={(ASSET_HASH, COIN_ID): SIGN_ME})

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await _yield_to_tasks()

        # Re-entering the same values while the fetch is outstanding.
        coordinator.handle_edit("coin", COIN_ID)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("name", "Spacebucks")
        client.gate((ASSET_HASH, COIN_ID)).set()
        await coordinator.settle()

        # And again after it resolved.
        coordinator.handle_edit("hash", ASSET_HASH)
        await coordinator.settle()
        assert coordinator.ready_challenge is not None

    asyncio.run(_run())
    assert client.calls == [(ASSET_HASH, COIN_ID)]


@pytest.mark.unit
def test_key_that_returns_after_going_incomplete_is_fetched_again() -> None:
    client = StubAuthorizationClient(challenges={(ASSET_HASH, COIN_ID): SIGN_ME})

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()
        coordinator.handle_edit("hash", "")
        coordinator.handle_edit("hash", ASSET_HASH)
        await coordinator.settle()
        assert coordinator.ready_challenge is not None

    asyncio.run(_run())
    assert client.calls == [(ASSET_HASH, COIN_ID), (ASSET_HASH, COIN_ID)]


@pytest.mark.unit
def test_stale_result_is_discarded_when_key_changed() -> None:
    first = (ASSET_HASH, COIN_ID)
    second = (ASSET_HASH, OTHER_COIN_ID)
    client = _GatedAuthorizationClient(
        responses={
            first: SIGN_ME,
            second: ChallengeResponse(address="xch1other", message="other-message"),
        }
    )

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await _yield_to_tasks()
        coordinator.handle_edit("coin", OTHER_COIN_ID)
        await _yield_to_tasks()
        assert client.calls == [first, second]

        client.gate(first).set()
        await _yield_to_tasks()
        assert coordinator.state.phase is ChallengePhase.FETCHING
        assert coordinator.state.key == ChallengeKey(*second)
        assert coordinator.state.challenge is None

        client.gate(second).set()
        await coordinator.settle()
        assert coordinator.ready_challenge == Challenge(signing_address="xch1other", message_to_sign="other-message")

    asyncio.run(_run())


@pytest.mark.unit
def test_late_stale_result_does_not_overwrite_newer_empty_answer() -> None:
    first = (ASSET_HASH, COIN_ID)
    second = (ASSET_HASH, OTHER_COIN_ID)
    client = _GatedAuthorizationClient(responses={first: SIGN_ME})

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await _yield_to_tasks()
        coordinator.handle_edit("coin", OTHER_COIN_ID)

        client.gate(second).set()
        await _yield_to_tasks()
        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge is None

        client.gate(first).set()
        await coordinator.settle()
        assert coordinator.state.key == ChallengeKey(*second)
        assert coordinator.ready_challenge is None

    asyncio.run(_run())


@pytest.mark.unit
def test_fetch_failure_is_ready_without_challenge_and_reports_error() -> None:
    failing = (ASSET_HASH, OTHER_COIN_ID)
    client = StubAuthorizationClient(
        challenges={(ASSET_HASH, COIN_ID): SIGN_ME},
        failures={failing: "authorization service unavailable"},
    )

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()
        assert coordinator.ready_challenge is not None

        coordinator.handle_edit("coin", OTHER_COIN_ID)
        await coordinator.settle()

        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge is None
        assert coordinator.state.error == "authorization service unavailable"

        coordinator.handle_edit("coin", "")
        assert coordinator.state.error is None

    asyncio.run(_run())


@dataclass
class _BrokenAuthorizationClient:
    async def fetch_challenge(self, *, asset_hash: str, coin_id: str) -> ChallengeResponse:
        raise RuntimeError("client blew up")


@pytest.mark.unit
def test_unexpected_client_error_is_ready_without_challenge() -> None:
    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=_BrokenAuthorizationClient())
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()

        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge is None
        assert coordinator.state.error == "client blew up"

    asyncio.run(_run())


@pytest.mark.unit
def test_hash_with_control_character_settles_through_http_client() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"address": "xch1signer", "message": "sign-me"}))
    client = HttpAuthorizationClient(auth_url="https://auth.example", transport=transport)
    asset_hash = "a" * 63 + "\t"

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", asset_hash)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()

        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge == Challenge(signing_address="xch1signer", message_to_sign="sign-me")

    asyncio.run(_run())


@pytest.mark.unit
def test_unreachable_authorization_url_is_ready_with_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    client = HttpAuthorizationClient(auth_url="https://auth.example/\tapi", transport=transport)

    async def _run() -> None:
        coordinator = ChallengeCoordinator(client=client)
        coordinator.handle_edit("hash", ASSET_HASH)
        coordinator.handle_edit("coin", COIN_ID)
        await coordinator.settle()

        assert coordinator.state.phase is ChallengePhase.READY
        assert coordinator.ready_challenge is None
        assert coordinator.state.error

    asyncio.run(_run())
