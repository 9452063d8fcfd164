from __future__ import annotations

import re
from decimal import Decimal

# "<flavor> <qty> - - - $<price>", anchored to the whole line
TICKET_LINE_RE = re.compile(r"^(.+?)\s+(\d+)\s+-\s+-\s+-\s+\$(\d+\.\d{2})$")


def parse_ticket_line(line: str) -> tuple[str, int, int] | None:
    """Return (flavor, quantity, price_cents) or None when the line is not an item line."""
    match = TICKET_LINE_RE.match(line.rstrip("\r"))
    if not match:
        return None
    flavor, quantity, price = match.groups()
    flavor = flavor.strip()
    qty = int(quantity)
    if not flavor or qty <= 0:
        return None
    return flavor, qty, int(Decimal(price) * 100)


def parse_ticket(text: str | None) -> list[tuple[str, int, int]]:
    """
    Recover item lines from a free-text receipt.

    Headers, totals and garbled lines are skipped, so a damaged ticket yields
    fewer items rather than an error.
    """
    items = []
    for line in (text or "").split("\n"):
        parsed = parse_ticket_line(line)
        if parsed is not None:
            items.append(parsed)
    return items
