# backend/heladeria/services/order_service.py
"""
Order Service: ingestion and read-side reconciliation.

Write path: the client may send a flat ``items`` list, a ``cups`` list (each
cup mapping item slots to items), or neither (ticket-only). Whatever the
shape, the order is stored as one header row plus one ``order_items`` row per
line, in a single transaction.

Read path: headers are fetched with their item rows, grouped back into one
entry per order, and each order's items are reconstructed from whichever
stored representation it has (see order_representation).
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field

from flask import current_app

from ..models import Order, OrderItem
from ..time_utils import utcnow
from ..validation import (
    ValidationError,
    optional_text,
    parse_money_cents,
    parse_optional_money_cents,
)
from .concurrency import begin_write, run_with_retry
from .order_representation import (
    LineItem,
    flatten_cups,
    parse_line_item,
    reconstruct_items,
    stored_representations,
)


@dataclass
class OrderSubmission:
    """A validated order, ready to persist."""
    total_cents: int
    items: list[LineItem] = field(default_factory=list)
    subtotal_cents: int | None = None
    discount_cents: int | None = None
    customer: str | None = None
    store: str | None = None
    ticket: str | None = None
    client_timestamp: str | None = None


def normalize_submission(payload: dict | None) -> OrderSubmission:
    """
    Validate a POST /orders body and flatten its items.

    Cups take precedence over a flat item list; with neither, the order has
    no items (ticket-only).
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    cups = payload.get("cups")
    items = payload.get("items")

    if cups:
        if isinstance(cups, str):
            # Earlier front-end revisions send the cups list as JSON text
            try:
                cups = json.loads(cups)
            except ValueError:
                raise ValidationError("cups must be a JSON array")
        if not isinstance(cups, list):
            raise ValidationError("cups must be an array")
        raw_items = flatten_cups(cups)
    elif items:
        if not isinstance(items, list):
            raise ValidationError("items must be an array")
        raw_items = items
    else:
        raw_items = []

    ticket = payload.get("ticket")
    if ticket is not None and not isinstance(ticket, str):
        raise ValidationError("ticket must be a string")

    client_timestamp = payload.get("timestamp")
    if client_timestamp is not None:
        client_timestamp = str(client_timestamp)[:64]

    return OrderSubmission(
        total_cents=parse_money_cents(payload.get("total"), "total"),
        items=[parse_line_item(entry) for entry in raw_items],
        subtotal_cents=parse_optional_money_cents(payload.get("subtotal"), "subtotal"),
        discount_cents=parse_optional_money_cents(payload.get("discount"), "discount"),
        customer=optional_text(payload.get("customer"), "customer", max_length=255),
        store=optional_text(payload.get("store"), "store", max_length=64),
        ticket=ticket or None,
        client_timestamp=client_timestamp,
    )


class OrderService:
    def __init__(self, session):
        self.session = session

    def create_order(self, payload: dict | None) -> Order:
        """Persist header and items atomically; the server assigns the timestamp."""
        submission = normalize_submission(payload)

        def _op():
            begin_write(self.session)
            order = Order(
                timestamp=utcnow(),
                client_timestamp=submission.client_timestamp,
                customer=submission.customer,
                store=submission.store,
                subtotal_cents=submission.subtotal_cents,
                discount_cents=submission.discount_cents,
                total_cents=submission.total_cents,
                ticket=submission.ticket,
            )
            self.session.add(order)
            self.session.flush()  # ensure order.id exists before items reference it

            for item in submission.items:
                self.session.add(OrderItem(
                    order_id=order.id,
                    flavor=item.flavor,
                    quantity=item.quantity,
                    price_cents=item.price_cents,
                ))

            self.session.commit()
            return order

        order = run_with_retry(_op, session=self.session)
        current_app.logger.info(
            "Order %s saved with %d items (store=%s)", order.id, len(submission.items), submission.store
        )
        return order

    def list_orders(
        self,
        *,
        limit: int | None = None,
        direction: str = "DESC",
        legacy_tickets: bool = False,
    ) -> list[dict]:
        """
        Most recent orders first by default, each with its reconstructed items.

        ``legacy_tickets`` turns on ticket-text parsing for orders that have no
        structured items.
        """
        if not limit or limit <= 0:
            limit = current_app.config["ORDERS_DEFAULT_LIMIT"]
        order_col = Order.id.asc() if str(direction).upper() == "ASC" else Order.id.desc()

        limited = (
            self.session.query(Order.id)
            .order_by(order_col)
            .limit(limit)
            .subquery()
        )
        rows = (
            self.session.query(Order, OrderItem)
            .join(limited, limited.c.id == Order.id)
            .outerjoin(OrderItem, OrderItem.order_id == Order.id)
            .order_by(order_col, OrderItem.id.asc())
            .all()
        )

        # Group the joined rows back into one entry per order, keeping row order
        grouped: dict[int, tuple[Order, list[OrderItem]]] = {}
        for order, item in rows:
            if order.id not in grouped:
                grouped[order.id] = (order, [])
            if item is not None:
                grouped[order.id][1].append(item)

        result = []
        for order, item_rows in grouped.values():
            reps = stored_representations(order, item_rows, include_ticket=legacy_tickets)
            entry = order.to_dict()
            entry["items"] = [item.to_dict() for item in reconstruct_items(reps)]
            result.append(entry)
        return result

