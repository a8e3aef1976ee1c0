from __future__ import annotations

from dataclasses import dataclass

from tail_registry.api.handlers.deps import ApiDeps
from tail_registry.clients.http import HttpAuthorizationClient, HttpRegistryClient
from tail_registry.clients.stub import StubAuthorizationClient, StubRegistryClient, StubWalletSession
from tail_registry.config import RegistrySettings, registry_settings_from_env
from tail_registry.domain.contracts import AuthorizationClient, RegistryClient, WalletSessionProvider
from tail_registry.roles import RuntimeRole


@dataclass
class RuntimeContainer:
    role: RuntimeRole
    settings: RegistrySettings
    authorization: AuthorizationClient
    registry: RegistryClient
    wallet: WalletSessionProvider
    api_deps: ApiDeps


def build_runtime_container(role: RuntimeRole, settings: RegistrySettings | None = None) -> RuntimeContainer:
    settings = settings or registry_settings_from_env()
    authorization: AuthorizationClient
    registry: RegistryClient
    if settings.auth_url and settings.add_tail_url:
        authorization = HttpAuthorizationClient(
            auth_url=settings.auth_url,
            timeout_ms=settings.request_timeout_ms,
        )
        registry = HttpRegistryClient(
            add_tail_url=settings.add_tail_url,
            timeout_ms=settings.request_timeout_ms,
        )
    else:
        authorization = StubAuthorizationClient()
        registry = StubRegistryClient()
    wallet = StubWalletSession(account_ids=list(settings.wallet_accounts))
    api_deps = ApiDeps(
        settings=settings,
        authorization=authorization,
        registry=registry,
        wallet=wallet,
        sessions={},
    )

    return RuntimeContainer(
        role=role,
        settings=settings,
        authorization=authorization,
        registry=registry,
        wallet=wallet,
        api_deps=api_deps,
    )
