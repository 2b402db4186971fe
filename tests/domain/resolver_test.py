from __future__ import annotations

import pytest

from pennychallenge.domain.models import Account, Pot
from pennychallenge.domain.resolver import resolve_account, resolve_pot
from pennychallenge.errors import NotFoundError


def test_resolve_account_returns_matching_entry() -> None:
    wanted = Account(id="acc_2", description="Joint", type="uk_retail_joint")
    accounts = [Account(id="acc_1", description="Personal"), wanted]

    assert resolve_account("acc_2", accounts) is wanted


def test_resolve_account_first_match_wins() -> None:
    first = Account(id="acc_1", description="first")
    second = Account(id="acc_1", description="second")

    assert resolve_account("acc_1", [first, second]) is first


@pytest.mark.parametrize("accounts", [[], [Account(id="acc_other")]])
def test_resolve_account_raises_with_identifier(accounts: list[Account]) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        resolve_account("acc_missing", accounts)

    assert excinfo.value.identifier == "acc_missing"
    assert excinfo.value.kind == "account"
    assert str(excinfo.value) == "Account acc_missing not found"


def test_resolve_pot_matches_and_reports_missing() -> None:
    pot = Pot(id="pot_1", name="Savings")

    assert resolve_pot("pot_1", [Pot(id="pot_0", name="Bills"), pot]) is pot
    with pytest.raises(NotFoundError) as excinfo:
        resolve_pot("pot_9", [pot])
    assert excinfo.value.identifier == "pot_9"
    assert excinfo.value.kind == "pot"
