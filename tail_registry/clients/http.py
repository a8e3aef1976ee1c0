from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from tail_registry.domain.contracts import SIGNATURE_HEADER
from tail_registry.domain.dto import ChallengeResponse, SubmitTailResponse
from tail_registry.domain.errors import ChallengeFetchError, DomainDependencyError

logger = logging.getLogger("tail_registry")

# InvalidURL is not an HTTPError; JSON decoding failures are ValueErrors.
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


def _optional_str(payload: object, key: str) -> str | None:
    if not isinstance(payload, dict):
        return None
    value = payload.get(key)
    if value is None or value == "":
        return None
    return str(value)


class HttpAuthorizationClient:
    def __init__(
        self,
        *,
        auth_url: str,
        timeout_ms: int = 10000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth_url = auth_url.rstrip("/")
        self._timeout = timeout_ms / 1000
        self._transport = transport

    async def fetch_challenge(self, *, asset_hash: str, coin_id: str) -> ChallengeResponse:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self._auth_url}/{quote(asset_hash, safe='')}",
                    json={"coinId": coin_id},
                )
                response.raise_for_status()
                payload = response.json()
        except _REQUEST_ERRORS as exc:
            logger.warning("authorization service request failed", extra={"asset_hash": asset_hash})
            raise ChallengeFetchError(str(exc) or exc.__class__.__name__) from exc

        return ChallengeResponse(
            address=_optional_str(payload, "address"),
            message=_optional_str(payload, "message"),
        )


class HttpRegistryClient:
    def __init__(
        self,
        *,
        add_tail_url: str,
        timeout_ms: int = 10000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._add_tail_url = add_tail_url
        self._timeout = timeout_ms / 1000
        self._transport = transport

    async def submit_tail(self, *, body: dict[str, str], signature: str) -> SubmitTailResponse:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._add_tail_url,
                    json=body,
                    headers={SIGNATURE_HEADER: signature},
                )
                response.raise_for_status()
                payload = response.json()
        except _REQUEST_ERRORS as exc:
            logger.warning("registry submission request failed", extra={"asset_hash": body.get("hash")})
            raise DomainDependencyError(str(exc) or exc.__class__.__name__) from exc

        return SubmitTailResponse(
            tx_id=_optional_str(payload, "tx_id"),
            error=_optional_str(payload, "error"),
        )
