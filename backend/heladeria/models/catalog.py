from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from ..validation import cents_to_amount


class Flavor(db.Model):
    """
    Catalog entry shared by every store.

    The name is the natural key: order items and store assignments reference
    flavors by name, and the integer id is only a convenience surrogate.

    `active` is the catalog-level flag. Whether a flavor is on sale at a given
    store is a separate fact, recorded by StoreFlavor rows.
    """
    __tablename__ = "flavors"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_flavors_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)

    # Authoritative storage in cents (JSON exposes a decimal amount)
    price_cents = db.Column(db.Integer, nullable=False)

    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Flavor id={self.id} name={self.name!r} price_cents={self.price_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": cents_to_amount(self.price_cents),
            "active": bool(self.active),
            "createdAt": to_utc_z(self.created_at),
        }


class StoreFlavor(db.Model):
    """
    "Flavor F is on sale at store S."

    Activation is row presence: a flavor without a row for the store is
    inactive there. No foreign key to flavors; deleting a flavor leaves its
    assignments dangling and they simply stop matching the catalog.
    """
    __tablename__ = "store_flavors"
    __table_args__ = (
        db.UniqueConstraint("store_name", "flavor_name", name="uq_store_flavors_store_flavor"),
        db.Index("ix_store_flavors_store_name", "store_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_name = db.Column(db.String(64), nullable=False)
    flavor_name = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<StoreFlavor store={self.store_name!r} flavor={self.flavor_name!r}>"
