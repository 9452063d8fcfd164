# Overview: Flask API routes for per-store flavor activation; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import get_services
from ..validation import ValidationError, require_object

store_flavors_bp = Blueprint("store_flavors", __name__, url_prefix="/store-flavors")


@store_flavors_bp.get("/<store>")
def get_store_flavors(store: str):
    """
    Every catalog flavor with store_active (1/0) for this store.

    The first read of a derived store copies its base store's assignments.
    """
    try:
        rows = get_services().store_flavors.get_active_flavors(store)
        return jsonify(rows), 200
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        current_app.logger.exception("Failed to load flavors for store %r", store)
        return jsonify({"error": str(exc)}), 500


@store_flavors_bp.post("/<store>")
def set_store_flavors(store: str):
    """
    Replace the store's active flavors.

    Body: {"flavorAssignments": [{"flavorName"|"flavorId": ..., "active"?: bool}, ...]}
    """
    try:
        payload = require_object(request.get_json(silent=True))
        get_services().store_flavors.set_active_flavors(store, payload.get("flavorAssignments"))
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception as exc:
        current_app.logger.exception("Failed to update flavors for store %r", store)
        return jsonify({"error": str(exc)}), 500

    return jsonify({"message": "Store flavors updated successfully"}), 200
