from __future__ import annotations

from tail_registry.api.handlers.deps import ApiDeps
from tail_registry.api.schemas import AccountResponse, ListAccountsResponse
from tail_registry.domain.wallet import chain_options, supported_accounts

COMPONENT_ID = "api.list_accounts"


async def list_accounts_handler(*, api_deps: ApiDeps) -> ListAccountsResponse:
    testnet = api_deps.settings.testnet
    accounts = supported_accounts(api_deps.wallet.accounts(), testnet=testnet)
    return ListAccountsResponse(
        chains=list(chain_options(testnet=testnet)),
        items=[
            AccountResponse(account_id=account.account_id, chain_id=account.chain_id, address=account.address)
            for account in accounts
        ],
    )
