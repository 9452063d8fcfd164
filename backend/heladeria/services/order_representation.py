"""
Stored order representations and their reconciliation to one canonical item list.

Orders have been persisted in three shapes over the life of the front-end:

- ``NormalizedItems``: one ``order_items`` row per line (the only shape written today)
- ``CupsBlob``: a JSON text column holding a list of cups, each cup mapping an
  item slot to ``{flavor, quantity, price}``
- ``TicketText``: the free-text receipt, one ``<flavor> <qty> - - - $<price>`` per line

Every representation resolves to a list of ``LineItem``. Resolution of stored
(historical) data never raises: entries that cannot be read are dropped.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Union

from flask import current_app

from ..validation import ValidationError, parse_money_cents, parse_quantity, require_text, cents_to_amount
from .ticket_parser import parse_ticket


@dataclass(frozen=True)
class LineItem:
    flavor: str
    quantity: int
    price_cents: int

    def to_dict(self) -> dict:
        return {
            "flavor": self.flavor,
            "quantity": self.quantity,
            "price": cents_to_amount(self.price_cents),
        }


@dataclass(frozen=True)
class NormalizedItems:
    items: tuple[LineItem, ...]
    source = "items"


@dataclass(frozen=True)
class CupsBlob:
    raw: str
    source = "cups"


@dataclass(frozen=True)
class TicketText:
    text: str
    source = "ticket"


StoredRepresentation = Union[NormalizedItems, CupsBlob, TicketText]


def flatten_cups(cups: Iterable[Any]) -> list[Any]:
    """
    Combine every cup's item mapping into one list of raw item entries.

    Slot keys carry no meaning; only the mapping's values are kept, so cup
    boundaries are not retained.
    """
    flat: list[Any] = []
    for cup in cups:
        if not isinstance(cup, dict):
            raise ValidationError("each cup must be an object with items")
        cup_items = cup.get("items") or {}
        if isinstance(cup_items, dict):
            flat.extend(cup_items.values())
        elif isinstance(cup_items, list):
            flat.extend(cup_items)
        else:
            raise ValidationError("cup items must be an object or a list")
    return flat


def parse_line_item(entry: Any) -> LineItem:
    """Strict parse of one client-supplied item; raises ValidationError."""
    if not isinstance(entry, dict):
        raise ValidationError("each item must be an object")
    return LineItem(
        flavor=require_text(entry.get("flavor"), "flavor", max_length=128),
        quantity=parse_quantity(entry.get("quantity")),
        price_cents=parse_money_cents(entry.get("price"), "price"),
    )


def _lenient_items(entries: Iterable[Any]) -> list[LineItem]:
    items = []
    for entry in entries:
        try:
            items.append(parse_line_item(entry))
        except ValidationError:
            continue
    return items


def _resolve_cups_blob(raw: str) -> list[LineItem]:
    try:
        cups = json.loads(raw)
    except (TypeError, ValueError):
        current_app.logger.warning("Unreadable cups blob skipped (%d chars)", len(raw or ""))
        return []
    if not isinstance(cups, list):
        return []

    entries: list[Any] = []
    for cup in cups:
        try:
            entries.extend(flatten_cups([cup]))
        except ValidationError:
            continue
    return _lenient_items(entries)


def resolve_items(rep: StoredRepresentation) -> list[LineItem]:
    if isinstance(rep, NormalizedItems):
        return list(rep.items)
    if isinstance(rep, CupsBlob):
        return _resolve_cups_blob(rep.raw)
    if isinstance(rep, TicketText):
        return [
            LineItem(flavor=flavor, quantity=qty, price_cents=price_cents)
            for flavor, qty, price_cents in parse_ticket(rep.text)
        ]
    raise TypeError(f"Unknown stored representation: {rep!r}")


def stored_representations(order, item_rows, *, include_ticket: bool) -> list[StoredRepresentation]:
    """
    Representations present on one stored order, in resolution priority.

    Item rows win over the cups blob; the ticket text is only consulted when
    the caller asks for the legacy fallback.
    """
    reps: list[StoredRepresentation] = []
    if item_rows:
        reps.append(NormalizedItems(tuple(
            LineItem(flavor=row.flavor, quantity=row.quantity, price_cents=row.price_cents)
            for row in item_rows
        )))
    if order.cups and order.cups.strip():
        reps.append(CupsBlob(order.cups))
    if include_ticket and order.ticket and order.ticket.strip():
        reps.append(TicketText(order.ticket))
    return reps


def reconstruct_items(reps: Iterable[StoredRepresentation]) -> list[LineItem]:
    """First representation that yields at least one item wins."""
    for rep in reps:
        items = resolve_items(rep)
        if items:
            return items
    return []
