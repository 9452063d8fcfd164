# backend/heladeria/services/catalog_service.py
"""
Catalog Service: the flavor list shared by every store.

Name is the natural key. Adding an existing name is a silent no-op so the
default catalog can be reseeded on every startup. Updates and deletes that
match nothing succeed without error.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..models import Flavor
from ..validation import ValidationError, parse_bool, parse_money_cents, require_text
from .concurrency import run_with_retry

DEFAULT_FLAVORS = [
    'Limón', 'Mango', 'Fresa', 'Fresa mora', 'Guanábana', 'Guayaba',
    'Maracuyá', 'Tuna', 'Sandía', 'Melón', 'Nanche', 'Tinto',
    'Jugo verde', 'Mandarina', 'Pitaya', 'Pitahaya', 'Tamarindo',
    'Piña', 'Acai Asai', 'Zapote', 'Gazpacho', 'Frambuesa',
    'Frutos rojos', 'Tequila limón', 'Mezcal higo', 'Queso',
    'Taro', 'Mamey', 'Coco', 'Pistache', 'Piñón', 'Choco Menta',
    'Chocolate (amaranto-cereza envinada)', 'Vainilla', 'Oreo',
    'Malvavisco', 'Cajeta', 'Fresas con crema', 'Café',
    'Pay de limón', 'Matcha', 'Mouse de Naranja', 'Arroz con leche',
    'Mazapán', 'Cereza', 'Frambuesa yoghurt', 'Rompope',
]


class CatalogService:
    def __init__(self, session):
        self.session = session

    def list_flavors(self) -> list[Flavor]:
        return self.session.query(Flavor).order_by(Flavor.name.asc()).all()

    def get_flavor(self, identity) -> Flavor | None:
        """
        Resolve a flavor by name, falling back to the numeric surrogate id.

        A name always wins, so a flavor literally named "12" is found by name.
        """
        if identity is None:
            return None
        key = str(identity).strip()
        flavor = self.session.query(Flavor).filter(Flavor.name == key).first()
        if flavor is None and key.isdigit():
            flavor = self.session.query(Flavor).filter(Flavor.id == int(key)).first()
        return flavor

    def get_flavor_by_id(self, flavor_id: int) -> Flavor | None:
        return self.session.query(Flavor).filter(Flavor.id == flavor_id).first()

    def add_flavor(self, name, price) -> tuple[Flavor, bool]:
        """
        Insert-or-ignore by name.

        Returns (flavor, created). An existing flavor is returned untouched.
        """
        name = require_text(name, "name", max_length=128)
        price_cents = parse_money_cents(price, "price")

        existing = self.session.query(Flavor).filter(Flavor.name == name).first()
        if existing:
            return existing, False

        flavor = Flavor(name=name, price_cents=price_cents, active=True)
        self.session.add(flavor)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same name
            self.session.rollback()
            return self.session.query(Flavor).filter(Flavor.name == name).one(), False

        current_app.logger.info("Flavor %r added at %s cents", name, price_cents)
        return flavor, True

    def update_flavor(self, identity, payload: dict | None) -> Flavor | None:
        """
        Partial update of price and/or active.

        Returns the updated flavor, or None when nothing matched the identity.
        """
        payload = payload or {}
        patch = {}
        if payload.get("price") is not None:
            patch["price_cents"] = parse_money_cents(payload["price"], "price")
        if payload.get("active") is not None:
            patch["active"] = parse_bool(payload["active"], "active")
        if not patch:
            raise ValidationError("No fields to update")

        def _op():
            flavor = self.get_flavor(identity)
            if flavor is None:
                return None
            for key, value in patch.items():
                setattr(flavor, key, value)
            self.session.commit()
            return flavor

        return run_with_retry(_op, session=self.session)

    def delete_flavor(self, identity) -> bool:
        """
        Remove a flavor. Order items and store assignments that reference it
        are left in place.
        """
        def _op():
            flavor = self.get_flavor(identity)
            if flavor is None:
                return False
            self.session.delete(flavor)
            self.session.commit()
            return True

        return run_with_retry(_op, session=self.session)

    def seed_defaults(self, price="12.00", names=None) -> int:
        """Insert any missing default flavors. Returns how many were created."""
        price_cents = parse_money_cents(price, "price")
        wanted = list(names if names is not None else DEFAULT_FLAVORS)

        existing = {
            name for (name,) in self.session.query(Flavor.name).filter(Flavor.name.in_(wanted))
        }
        created = 0
        for name in wanted:
            if name in existing:
                continue
            self.session.add(Flavor(name=name, price_cents=price_cents, active=True))
            existing.add(name)
            created += 1

        if created:
            self.session.commit()
            current_app.logger.info("Seeded %d default flavors", created)
        return created
