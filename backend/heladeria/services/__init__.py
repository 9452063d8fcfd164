"""
Service wiring.

Each application owns one set of service instances, built in create_app()
around the app's database session and stored in ``app.extensions``.
"""
from __future__ import annotations

from flask import Flask, current_app

from .catalog_service import CatalogService
from .order_service import OrderService
from .store_flavor_service import StoreFlavorService

EXTENSION_KEY = "heladeria.services"


class Services:
    def __init__(self, session, *, derived_stores: dict[str, str]):
        self.catalog = CatalogService(session)
        self.store_flavors = StoreFlavorService(session, catalog=self.catalog, derived_stores=derived_stores)
        self.orders = OrderService(session)


def init_services(app: Flask, session) -> Services:
    base_store = app.config["BASE_STORE"]
    derived_stores = {name: base_store for name in app.config["DERIVED_STORES"] if name != base_store}
    services = Services(session, derived_stores=derived_stores)
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
