from __future__ import annotations

from typing import Sequence

from pennychallenge.domain.models import Account, Pot


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(header) for header in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))

    header = " ".join(f"{label:<{width}}" for label, width in zip(headers, widths)).rstrip()
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(" ".join(f"{cell:<{width}}" for cell, width in zip(row, widths)).rstrip())
    lines.append("-" * len(header))
    return "\n".join(lines)


def render_accounts(accounts: Sequence[Account]) -> None:
    if not accounts:
        print("  (no accounts)")
        return
    rows = [(account.id, account.description, str(account.account_type)) for account in accounts]
    print(format_table(("ID", "Description", "Account Type"), rows))


def render_pots(pots: Sequence[Pot]) -> None:
    if not pots:
        print("  (no pots)")
        return
    rows = [(pot.id, pot.name) for pot in pots]
    print(format_table(("ID", "Name"), rows))


__all__ = ["format_table", "render_accounts", "render_pots"]
