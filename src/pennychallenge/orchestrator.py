from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Callable, Iterator, Protocol

from pennychallenge.config import AppSettings
from pennychallenge.domain.models import Account, Balance, Pot
from pennychallenge.domain.resolver import resolve_account, resolve_pot
from pennychallenge.domain.savings import amount_to_save, dedupe_id, utc_date
from pennychallenge.errors import PennyChallengeError, RunFailed
from pennychallenge.services.monzo_client import MonzoClient
from pennychallenge.services.oauth import TokenRefresher

logger = logging.getLogger(__name__)


class Stage(StrEnum):
    REFRESH = "refresh"
    ACCOUNT = "account"
    BALANCE = "balance"
    POT = "pot"
    DEPOSIT = "deposit"


class RunState(StrEnum):
    START = "start"
    TOKEN_REFRESHED = "token_refreshed"
    ACCOUNT_RESOLVED = "account_resolved"
    BALANCE_CHECKED = "balance_checked"
    POT_RESOLVED = "pot_resolved"
    DEPOSITED = "deposited"
    DONE = "done"


class RunOutcome(StrEnum):
    DONE = "done"
    INSUFFICIENT_BALANCE = "insufficient_balance"


class Marker(StrEnum):
    OK = "OK"
    ERROR = "ERROR"
    FAIL = "FAIL"


STAGE_LABELS: dict[Stage, str] = {
    Stage.REFRESH: "Refreshing access token",
    Stage.ACCOUNT: "Getting account",
    Stage.BALANCE: "Checking balance",
    Stage.POT: "Getting pot",
    Stage.DEPOSIT: "Saving",
}


class LedgerClient(Protocol):
    def list_accounts(self) -> list[Account]: ...

    def list_pots(self) -> list[Pot]: ...

    def get_balance(self, account: Account) -> Balance: ...

    def deposit(self, pot: Pot, source_account: Account, amount: int, dedupe_id: str) -> None: ...


class ProgressReporter(Protocol):
    def begin(self, stage: Stage) -> None: ...

    def end(self, stage: Stage, marker: Marker) -> None: ...


class _SilentReporter:
    def begin(self, stage: Stage) -> None:
        return None

    def end(self, stage: Stage, marker: Marker) -> None:
        return None


@dataclass(frozen=True)
class RunResult:
    outcome: RunOutcome
    state: RunState
    balance: int | None = None
    run_date: date | None = None
    amount: int | None = None
    dedupe_id: str | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SavingsOrchestrator:
    """Runs one day of the reversed penny challenge.

    refresh -> resolve account -> check balance -> resolve pot -> deposit.
    The first error aborts the run as ``RunFailed(stage, cause)``; a balance
    below ``settings.min_balance`` is a normal outcome, not an error.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        refresher: TokenRefresher,
        client_factory: Callable[[str], LedgerClient] | None = None,
        reporter: ProgressReporter | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not settings.source_account:
            msg = "source_account must be configured"
            raise ValueError(msg)
        if not settings.destination_pot:
            msg = "destination_pot must be configured"
            raise ValueError(msg)

        self.settings = settings
        self.refresher = refresher
        self.client_factory = client_factory or self._default_client
        self.reporter = reporter or _SilentReporter()
        self.clock = clock
        self.state = RunState.START

    def run(self) -> RunResult:
        self.state = RunState.START

        with self._stage(Stage.REFRESH):
            credential = self.refresher.refresh()
            client = self.client_factory(credential.access_token)
        self._advance(RunState.TOKEN_REFRESHED)

        with self._stage(Stage.ACCOUNT):
            account = resolve_account(self.settings.source_account, client.list_accounts())
        self._advance(RunState.ACCOUNT_RESOLVED)

        with self._stage(Stage.BALANCE, report_ok=False):
            balance = client.get_balance(account)
        if balance.amount < self.settings.min_balance:
            self.reporter.end(Stage.BALANCE, Marker.FAIL)
            logger.warning(
                "Balance %d below minimum %d; skipping deposit", balance.amount, self.settings.min_balance
            )
            return RunResult(
                outcome=RunOutcome.INSUFFICIENT_BALANCE,
                state=self.state,
                balance=balance.amount,
            )
        self.reporter.end(Stage.BALANCE, Marker.OK)
        self._advance(RunState.BALANCE_CHECKED)

        with self._stage(Stage.POT):
            pot = resolve_pot(self.settings.destination_pot, client.list_pots())
        self._advance(RunState.POT_RESOLVED)

        with self._stage(Stage.DEPOSIT):
            run_date = utc_date(self.clock())
            amount = amount_to_save(run_date)
            deposit_id = dedupe_id(run_date)
            client.deposit(pot, account, amount, deposit_id)
        self._advance(RunState.DEPOSITED)

        self._advance(RunState.DONE)
        logger.info("Saved %d into pot %s for %s", amount, pot.id, run_date.isoformat())
        return RunResult(
            outcome=RunOutcome.DONE,
            state=self.state,
            balance=balance.amount,
            run_date=run_date,
            amount=amount,
            dedupe_id=deposit_id,
        )

    @contextmanager
    def _stage(self, stage: Stage, *, report_ok: bool = True) -> Iterator[None]:
        self.reporter.begin(stage)
        try:
            yield
        except (PennyChallengeError, ValueError) as exc:
            self.reporter.end(stage, Marker.ERROR)
            logger.error("Stage %s failed: %s", stage, exc)
            raise RunFailed(stage, exc) from exc
        if report_ok:
            self.reporter.end(stage, Marker.OK)

    def _advance(self, state: RunState) -> None:
        logger.debug("Run state %s -> %s", self.state, state)
        self.state = state

    def _default_client(self, access_token: str) -> LedgerClient:
        return MonzoClient(access_token=access_token, base_url=self.settings.api_base_url)


__all__ = [
    "LedgerClient",
    "Marker",
    "ProgressReporter",
    "RunOutcome",
    "RunResult",
    "RunState",
    "SavingsOrchestrator",
    "STAGE_LABELS",
    "Stage",
]
