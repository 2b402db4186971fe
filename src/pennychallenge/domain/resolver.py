from __future__ import annotations

from typing import Iterable

from pennychallenge.errors import NotFoundError

from .models import Account, Pot


def resolve_account(account_id: str, accounts: Iterable[Account]) -> Account:
    for account in accounts:
        if account.id == account_id:
            return account
    raise NotFoundError("account", account_id)


def resolve_pot(pot_id: str, pots: Iterable[Pot]) -> Pot:
    for pot in pots:
        if pot.id == pot_id:
            return pot
    raise NotFoundError("pot", pot_id)


__all__ = ["resolve_account", "resolve_pot"]
