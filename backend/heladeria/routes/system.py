# backend/heladeria/routes/system.py
"""
System health and version endpoints.

Provides a database health check and version information for deployment
debugging.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Flavor, Order, OrderItem, StoreFlavor
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


def check_database_health() -> dict:
    """
    Check database connectivity with a count over each collection.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        details = {
            "flavors": db.session.query(Flavor).count(),
            "store_flavors": db.session.query(StoreFlavor).count(),
            "orders": db.session.query(Order).count(),
            "order_items": db.session.query(OrderItem).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_catalog_health() -> dict:
    """An empty catalog still serves requests, but no store can sell anything."""
    try:
        flavor_count = db.session.query(Flavor).count()
    except Exception:
        current_app.logger.exception("Catalog health check failed")
        return {"status": "unhealthy", "error": "Catalog error"}

    if flavor_count == 0:
        return {"status": "degraded", "warning": "Flavor catalog is empty"}
    return {"status": "healthy", "details": {"flavors": flavor_count}}


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    catalog_health = check_catalog_health()

    all_checks = [database_health, catalog_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status = "unhealthy"
        http_status = 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "catalog": catalog_health,
        }
    }

    return response, http_status


@system_bp.get("/version")
def version():
    """
    Non-sensitive deployment information: API version, environment,
    Python version and server time.
    """
    import sys

    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": utcnow().isoformat() + "Z",
    }
