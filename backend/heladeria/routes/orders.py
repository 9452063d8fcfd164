# Overview: Flask API routes for orders; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import get_services
from ..validation import ValidationError

orders_bp = Blueprint("orders", __name__)


def _list_args(default_limit: int) -> dict:
    """
    Query params shared by the listing routes.

    - limit: int (optional); missing, zero, negative or non-numeric falls back to the default
    - order: "ASC" for oldest first; anything else is newest first
    """
    limit = request.args.get("limit", type=int)
    if not limit or limit <= 0:
        limit = default_limit
    direction = "ASC" if (request.args.get("order") or "").upper() == "ASC" else "DESC"
    return {"limit": limit, "direction": direction}


@orders_bp.post("/orders")
def create_order():
    """
    Save an order.

    Body: {total, items? | cups?, ticket?, customer?, store?, subtotal?, discount?, timestamp?}
    """
    payload = request.get_json(silent=True)
    try:
        order = get_services().orders.create_order(payload)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        current_app.logger.exception("Failed to save order")
        return jsonify({"error": str(exc)}), 500

    return jsonify({"id": order.id, "message": "Order saved successfully"}), 200


@orders_bp.get("/orders")
def list_orders():
    """Recent orders with their structured items."""
    try:
        orders = get_services().orders.list_orders(
            legacy_tickets=False,
            **_list_args(current_app.config["ORDERS_DEFAULT_LIMIT"]),
        )
        return jsonify(orders), 200
    except Exception as exc:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"error": str(exc)}), 500


@orders_bp.get("/all-orders")
def list_all_orders():
    """
    Like /orders, but orders stored only as ticket text get their items
    parsed out of the ticket.
    """
    try:
        orders = get_services().orders.list_orders(
            legacy_tickets=True,
            **_list_args(current_app.config["ALL_ORDERS_DEFAULT_LIMIT"]),
        )
        return jsonify(orders), 200
    except Exception as exc:
        current_app.logger.exception("Failed to list all orders")
        return jsonify({"error": str(exc)}), 500
