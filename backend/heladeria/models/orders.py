from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from ..validation import cents_to_amount


class Order(db.Model):
    """
    Order header.

    New orders always store their lines as OrderItem rows. The `ticket` and
    `cups` columns exist so rows written by earlier front-end revisions stay
    readable: `ticket` is the free-text receipt, `cups` the JSON blob of
    per-cup item mappings. Neither is used for new item data.

    `timestamp` is assigned by the server and is the canonical creation time;
    whatever the client sent is kept verbatim in `client_timestamp` for display.
    """
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    client_timestamp = db.Column(db.String(64), nullable=True)

    customer = db.Column(db.String(255), nullable=True)
    store = db.Column(db.String(64), nullable=True, index=True)

    # All amounts in cents
    subtotal_cents = db.Column(db.Integer, nullable=True)
    discount_cents = db.Column(db.Integer, nullable=True)
    total_cents = db.Column(db.Integer, nullable=False)

    # Legacy representations (read-only)
    ticket = db.Column(db.Text, nullable=True)
    cups = db.Column(db.Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Order id={self.id} total_cents={self.total_cents} store={self.store!r}>"

    def to_dict(self) -> dict:
        """Header fields only; the order service attaches the reconstructed items."""
        return {
            "id": self.id,
            "timestamp": to_utc_z(self.timestamp),
            "clientTimestamp": self.client_timestamp,
            "customer": self.customer,
            "store": self.store,
            "subtotal": cents_to_amount(self.subtotal_cents),
            "discount": cents_to_amount(self.discount_cents),
            "total": cents_to_amount(self.total_cents),
            "ticket": self.ticket,
        }


class OrderItem(db.Model):
    """One line of an order, owned exclusively by its header."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    # Flavor by name (natural key); not a foreign key so catalog deletes never touch history
    flavor = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<OrderItem order_id={self.order_id} flavor={self.flavor!r} quantity={self.quantity}>"
