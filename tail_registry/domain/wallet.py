from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging

from tail_registry.domain.errors import DomainValidationError

CHIA_NAMESPACE = "chia"
DEFAULT_MAIN_CHAINS = ("chia:mainnet",)
DEFAULT_TEST_CHAINS = ("chia:testnet",)

logger = logging.getLogger("tail_registry")


@dataclass(frozen=True)
class ChainAccount:
    namespace: str
    reference: str
    address: str

    @property
    def chain_id(self) -> str:
        return f"{self.namespace}:{self.reference}"

    @property
    def account_id(self) -> str:
        return f"{self.chain_id}:{self.address}"


def parse_account(account_id: str) -> ChainAccount:
    parts = account_id.split(":")
    if len(parts) != 3 or not all(parts):
        raise DomainValidationError(
            f"account id '{account_id}' must look like namespace:reference:address"
        )
    namespace, reference, address = parts
    return ChainAccount(namespace=namespace, reference=reference, address=address)


def chain_options(*, testnet: bool) -> tuple[str, ...]:
    return DEFAULT_TEST_CHAINS if testnet else DEFAULT_MAIN_CHAINS


def supported_accounts(account_ids: Iterable[str], *, testnet: bool) -> list[ChainAccount]:
    """Accounts of the connected wallet that can sign for the active chain."""
    allowed = chain_options(testnet=testnet)
    accounts: list[ChainAccount] = []
    for account_id in account_ids:
        try:
            account = parse_account(account_id)
        except DomainValidationError:
            logger.warning("malformed wallet account skipped: %s", account_id)
            continue
        if account.namespace == CHIA_NAMESPACE and account.chain_id in allowed:
            accounts.append(account)
    return accounts
