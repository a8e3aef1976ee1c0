from __future__ import annotations

from dataclasses import dataclass

from tail_registry.config import RegistrySettings
from tail_registry.domain.contracts import AuthorizationClient, RegistryClient, WalletSessionProvider
from tail_registry.services.form_session import FormSession


@dataclass(frozen=True)
class ApiDeps:
    settings: RegistrySettings
    authorization: AuthorizationClient
    registry: RegistryClient
    wallet: WalletSessionProvider
    sessions: dict[str, FormSession]
