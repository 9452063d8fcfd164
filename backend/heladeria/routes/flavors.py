# Overview: Flask API routes for the flavor catalog; parses input and returns JSON responses.

# backend/heladeria/routes/flavors.py
"""
Flavor catalog routes.

Updates and deletes of an unknown flavor answer 200 like any other call;
the catalog treats them as no-ops.
"""
from flask import Blueprint, current_app, jsonify, request

from ..services import get_services
from ..validation import ValidationError, require_object

flavors_bp = Blueprint("flavors", __name__, url_prefix="/flavors")


@flavors_bp.get("")
def list_flavors():
    """All flavors ordered by name."""
    try:
        flavors = get_services().catalog.list_flavors()
        return jsonify([flavor.to_dict() for flavor in flavors]), 200
    except Exception as exc:
        current_app.logger.exception("Failed to list flavors")
        return jsonify({"error": str(exc)}), 500


@flavors_bp.post("")
def add_flavor():
    """
    Add a flavor.

    Body: {"name": str, "price": number}
    A name that already exists is ignored (no error).
    """
    try:
        payload = require_object(request.get_json(silent=True))
        _, created = get_services().catalog.add_flavor(payload.get("name"), payload.get("price"))
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        current_app.logger.exception("Failed to add flavor")
        return jsonify({"error": str(exc)}), 500

    message = "Flavor added" if created else "Flavor already exists"
    return jsonify({"message": message}), 200


@flavors_bp.put("/<path:identity>")
def update_flavor(identity: str):
    """
    Partial update.

    Body: {"price"?: number, "active"?: bool}
    """
    try:
        payload = require_object(request.get_json(silent=True))
        get_services().catalog.update_flavor(identity, payload)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        current_app.logger.exception("Failed to update flavor %r", identity)
        return jsonify({"error": str(exc)}), 500

    return jsonify({"message": "Flavor updated"}), 200


@flavors_bp.delete("/<path:identity>")
def delete_flavor(identity: str):
    try:
        get_services().catalog.delete_flavor(identity)
    except Exception as exc:
        current_app.logger.exception("Failed to delete flavor %r", identity)
        return jsonify({"error": str(exc)}), 500

    return jsonify({"message": "Flavor deleted"}), 200
