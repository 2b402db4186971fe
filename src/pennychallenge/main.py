from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence, TextIO

from pydantic import ValidationError

from pennychallenge.config import AppSettings, load_settings
from pennychallenge.errors import PennyChallengeError, RunFailed
from pennychallenge.orchestrator import (
    STAGE_LABELS,
    LedgerClient,
    Marker,
    RunOutcome,
    SavingsOrchestrator,
    Stage,
)
from pennychallenge.services.monzo_client import MonzoClient
from pennychallenge.services.oauth import MonzoOAuthClient, TokenRefresher
from pennychallenge.services.token_store import JsonFileTokenStore, TokenStore
from pennychallenge.utils.tables import render_accounts, render_pots

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INSUFFICIENT_BALANCE = 2

STAGE_ERRORS: dict[Stage, str] = {
    Stage.REFRESH: "Error refreshing access token",
    Stage.ACCOUNT: "Error getting account",
    Stage.BALANCE: "Error checking balance",
    Stage.POT: "Error getting pot",
    Stage.DEPOSIT: "Error saving",
}

DESCRIPTION = """Automated (reversed) penny challenge.

Saves 365p (366p in a leap year) on the first day of the year, one penny less
each day after, into a Monzo pot. Run it once a day from a scheduler."""

logger = logging.getLogger(__name__)


class ConsoleReporter:
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def begin(self, stage: Stage) -> None:
        print(f"{STAGE_LABELS[stage]}... ", end="", flush=True, file=self.stream or sys.stdout)

    def end(self, stage: Stage, marker: Marker) -> None:
        print(marker, file=self.stream or sys.stdout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pennychallenge",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--env-file", type=Path, help="Settings file (default: .env in the working directory).")
    parser.add_argument("-I", "--client-id", help="Monzo API client ID.")
    parser.add_argument("-S", "--client-secret", help="Monzo API client secret.")
    parser.add_argument("--token-path", type=Path, help="Where the OAuth credentials are stored.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress details.")

    subparsers = parser.add_subparsers(dest="command")
    run_parser = subparsers.add_parser("run", help="Save today's amount (default command).")
    for target, default in ((parser, None), (run_parser, argparse.SUPPRESS)):
        # SUPPRESS keeps the subcommand from clobbering values given before it.
        target.add_argument("-s", "--source-account", default=default, help="Account ID to save from.")
        target.add_argument("-d", "--destination-pot", default=default, help="Pot ID to save to.")
    subparsers.add_parser("accounts", help="List Monzo accounts; the ID selects the account to save from.")
    subparsers.add_parser("pots", help="List Monzo pots; the ID selects the pot to save to.")
    subparsers.add_parser("auth", help="Authorize against Monzo and store the credentials.")
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    return load_settings(
        env_file=args.env_file,
        client_id=args.client_id,
        client_secret=args.client_secret,
        token_path=args.token_path,
        source_account=getattr(args, "source_account", None),
        destination_pot=getattr(args, "destination_pot", None),
    )


def build_refresher(settings: AppSettings) -> TokenRefresher:
    oauth = MonzoOAuthClient.from_settings(settings)
    store = JsonFileTokenStore(path=settings.token_path)
    return TokenRefresher(oauth=oauth, store=store)


def run_savings(
    settings: AppSettings,
    *,
    refresher: TokenRefresher,
    client_factory: Callable[[str], LedgerClient] | None = None,
    reporter: ConsoleReporter | None = None,
) -> int:
    orchestrator = SavingsOrchestrator(
        settings=settings,
        refresher=refresher,
        client_factory=client_factory,
        reporter=reporter or ConsoleReporter(),
    )
    try:
        result = orchestrator.run()
    except RunFailed as exc:
        print(f"{STAGE_ERRORS[Stage(exc.stage)]}: {exc.cause}")
        return EXIT_FAILURE

    if result.outcome is RunOutcome.INSUFFICIENT_BALANCE:
        print("Account balance too low")
        return EXIT_INSUFFICIENT_BALANCE
    print(f"Saved {result.amount}p ({result.dedupe_id})")
    return EXIT_OK


def run_listing(
    command: str,
    *,
    refresher: TokenRefresher,
    client_factory: Callable[[str], LedgerClient],
) -> int:
    try:
        credential = refresher.refresh()
        client = client_factory(credential.access_token)
        if command == "accounts":
            render_accounts(client.list_accounts())
        else:
            render_pots(client.list_pots())
    except PennyChallengeError as exc:
        print(f"Error listing {command}: {exc}")
        return EXIT_FAILURE
    return EXIT_OK


def run_auth(
    oauth: MonzoOAuthClient,
    store: TokenStore,
    *,
    read_code: Callable[[str], str] = input,
) -> int:
    print(f"Go to {oauth.authorization_url()}")
    code = read_code("Authorization code: ").strip()

    print("Getting access token... ", end="", flush=True)
    try:
        credential = oauth.exchange_code(code)
    except (PennyChallengeError, ValueError) as exc:
        print(Marker.ERROR)
        print(f"Error getting access token: {exc}")
        return EXIT_FAILURE
    print(Marker.OK)

    print("Writing access token... ", end="", flush=True)
    try:
        store.save(credential)
    except PennyChallengeError as exc:
        print(Marker.ERROR)
        print(f"Error writing access token: {exc}")
        return EXIT_FAILURE
    print(Marker.OK)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        settings = settings_from_args(args)
    except ValidationError as exc:
        print(f"Configuration error: {exc}")
        return EXIT_FAILURE

    command = args.command or "run"
    logger.info("Running %s with credentials at %s", command, settings.token_path)

    if command == "auth":
        oauth = MonzoOAuthClient.from_settings(settings)
        return run_auth(oauth, JsonFileTokenStore(path=settings.token_path))

    refresher = build_refresher(settings)

    def client_factory(access_token: str) -> LedgerClient:
        return MonzoClient(access_token=access_token, base_url=settings.api_base_url)

    if command in ("accounts", "pots"):
        return run_listing(command, refresher=refresher, client_factory=client_factory)

    try:
        return run_savings(settings, refresher=refresher, client_factory=client_factory)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return EXIT_FAILURE


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
