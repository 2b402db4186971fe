from __future__ import annotations

from typing import cast

import pytest

from pennychallenge.config import AppSettings
from pennychallenge.domain.models import Account, Credential, Pot
from pennychallenge.services.oauth import MonzoOAuthClient, TokenRefresher
from tests.helpers.constants import DESTINATION_POT, SOURCE_ACCOUNT
from tests.helpers.fakes import FakeLedger, InMemoryTokenStore, StubOAuthClient


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    # Keep a developer's .env and exported Monzo settings out of the tests.
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    for name in ("CLIENT_ID", "CLIENT_SECRET", "SOURCE_ACCOUNT", "DESTINATION_POT", "TOKEN_PATH", "MIN_BALANCE", "API_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="function")
def settings() -> AppSettings:
    return AppSettings(
        client_id="client",
        client_secret="secret",
        source_account=SOURCE_ACCOUNT,
        destination_pot=DESTINATION_POT,
    )


@pytest.fixture(scope="function")
def stored_credential() -> Credential:
    return Credential(access_token="access-1", refresh_token="refresh-1")


@pytest.fixture(scope="function")
def token_store(stored_credential: Credential) -> InMemoryTokenStore:
    return InMemoryTokenStore(stored_credential)


@pytest.fixture(scope="function")
def oauth() -> StubOAuthClient:
    return StubOAuthClient()


@pytest.fixture(scope="function")
def refresher(oauth: StubOAuthClient, token_store: InMemoryTokenStore) -> TokenRefresher:
    return TokenRefresher(oauth=cast(MonzoOAuthClient, oauth), store=token_store)


@pytest.fixture(scope="function")
def ledger() -> FakeLedger:
    return FakeLedger(
        accounts=[
            Account(id="acc_prepaid", description="Prepaid card", type="uk_prepaid"),
            Account(id=SOURCE_ACCOUNT, description="Current account", type="uk_retail"),
        ],
        pots=[Pot(id="pot_holiday", name="Holiday"), Pot(id=DESTINATION_POT, name="Penny challenge")],
        balances={SOURCE_ACCOUNT: 5_000},
    )
