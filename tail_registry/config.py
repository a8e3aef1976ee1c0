from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RegistrySettings:
    auth_url: str | None = None
    add_tail_url: str | None = None
    request_timeout_ms: int = 10000
    testnet: bool = False
    wallet_accounts: tuple[str, ...] = ()

    @property
    def uses_remote_services(self) -> bool:
        return bool(self.auth_url and self.add_tail_url)


def registry_settings_from_env() -> RegistrySettings:
    return RegistrySettings(
        auth_url=_env_url("TAIL_AUTH_URL"),
        add_tail_url=_env_url("TAIL_ADD_URL"),
        request_timeout_ms=_env_int("TAIL_REQUEST_TIMEOUT_MS", 10000),
        testnet=_env_bool("TAIL_TESTNET"),
        wallet_accounts=_env_list("TAIL_WALLET_ACCOUNTS"),
    )


def _env_url(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    return value.rstrip("/")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default

    return parsed if parsed > 0 else default


def _env_bool(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


def _env_list(name: str) -> tuple[str, ...]:
    value = os.getenv(name, "")
    return tuple(item.strip() for item in value.split(",") if item.strip())
