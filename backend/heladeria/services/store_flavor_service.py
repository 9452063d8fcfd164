# backend/heladeria/services/store_flavor_service.py
"""
Store Assignment Service: which catalog flavors are on sale at each store.

Activation is row presence in ``store_flavors``. A derived store (a second
point of sale sharing one base configuration) starts with no rows and
inherits the base store's assignments the first time it is read.

Both the bootstrap copy and the full-replace update run inside a per-store
critical section and a single transaction, so:
- a (store, flavor) pair never gets two rows, even with simultaneous first reads
- readers never see the empty set between the delete and the inserts
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import and_

from ..models import Flavor, StoreFlavor
from ..validation import ValidationError, parse_bool, parse_quantity, require_text
from .concurrency import KeyedLocks, begin_write, run_with_retry


class StoreFlavorService:
    def __init__(self, session, *, catalog, derived_stores: dict[str, str] | None = None, locks: KeyedLocks | None = None):
        self.session = session
        self.catalog = catalog
        # derived store name -> base store name
        self.derived_stores = dict(derived_stores or {})
        self.locks = locks if locks is not None else KeyedLocks()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def assigned_flavor_names(self, store_name: str) -> list[str]:
        rows = (
            self.session.query(StoreFlavor.flavor_name)
            .filter(StoreFlavor.store_name == store_name)
            .order_by(StoreFlavor.flavor_name.asc())
            .all()
        )
        return [name for (name,) in rows]

    def get_active_flavors(self, store_name: str) -> list[dict]:
        """
        Every catalog flavor, annotated with ``store_active`` (1/0) for this store.

        Triggers the bootstrap copy when the store is derived and has no rows yet.
        Ordered by flavor name.
        """
        store_name = require_text(store_name, "store", max_length=64)

        with self.locks.hold(store_name):
            base_store = self.derived_stores.get(store_name)
            if base_store and self._assignment_count(store_name) == 0:
                self._bootstrap_locked(store_name, base_store)

            rows = (
                self.session.query(Flavor, StoreFlavor.id)
                .outerjoin(
                    StoreFlavor,
                    and_(StoreFlavor.flavor_name == Flavor.name, StoreFlavor.store_name == store_name),
                )
                .order_by(Flavor.name.asc())
                .all()
            )

        result = []
        for flavor, assignment_id in rows:
            entry = flavor.to_dict()
            entry["store_active"] = 1 if assignment_id is not None else 0
            result.append(entry)
        return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def copy_assignments(self, source_store: str, target_store: str) -> int:
        """Add the source store's assignments that the target lacks. Returns rows inserted."""
        source_store = require_text(source_store, "source store", max_length=64)
        target_store = require_text(target_store, "target store", max_length=64)
        if source_store == target_store:
            raise ValidationError("source and target store must differ")

        with self.locks.hold(target_store):
            return self._copy_locked(source_store, target_store)

    def set_active_flavors(self, store_name: str, assignments) -> int:
        """
        Full replace: the store ends up with exactly the active entries given.

        Entries are ``{"flavorName": str}`` or ``{"flavorId": int}`` with an
        optional ``active`` flag (default true); inactive entries are omitted.
        Returns the number of active assignments stored.
        """
        store_name = require_text(store_name, "store", max_length=64)
        if not isinstance(assignments, list):
            raise ValidationError("flavorAssignments must be an array")

        names = self._resolve_assignment_names(assignments)

        with self.locks.hold(store_name):
            def _op():
                begin_write(self.session)
                self.session.query(StoreFlavor).filter(
                    StoreFlavor.store_name == store_name
                ).delete(synchronize_session=False)
                for name in names:
                    self.session.add(StoreFlavor(store_name=store_name, flavor_name=name))
                self.session.commit()
                return len(names)

            count = run_with_retry(_op, session=self.session)

        current_app.logger.info("Store %r flavor assignments replaced (%d active)", store_name, count)
        return count

    # ------------------------------------------------------------------
    # Internals (callers hold the store lock)
    # ------------------------------------------------------------------

    def _assignment_count(self, store_name: str) -> int:
        return self.session.query(StoreFlavor).filter(StoreFlavor.store_name == store_name).count()

    def _bootstrap_locked(self, derived_store: str, base_store: str) -> int:
        def _op():
            begin_write(self.session)
            # Re-check under the write lock; another process may have bootstrapped already
            if self._assignment_count(derived_store):
                self.session.commit()
                return 0
            return self._insert_missing(base_store, derived_store)

        copied = run_with_retry(_op, session=self.session)
        if copied:
            current_app.logger.info(
                "Store %r bootstrapped with %d flavors from %r", derived_store, copied, base_store
            )
        return copied

    def _copy_locked(self, source_store: str, target_store: str) -> int:
        def _op():
            begin_write(self.session)
            return self._insert_missing(source_store, target_store)

        return run_with_retry(_op, session=self.session)

    def _insert_missing(self, source_store: str, target_store: str) -> int:
        source_names = self.assigned_flavor_names(source_store)
        present = set(self.assigned_flavor_names(target_store))
        inserted = 0
        for name in source_names:
            if name in present:
                continue
            self.session.add(StoreFlavor(store_name=target_store, flavor_name=name))
            present.add(name)
            inserted += 1
        self.session.commit()
        return inserted

    def _resolve_assignment_names(self, assignments: list) -> list[str]:
        """
        Validate every entry before anything is deleted.

        Unknown flavor names are kept (assignments tolerate dangling names);
        unknown flavor ids cannot be mapped to a name and are skipped.
        """
        names: list[str] = []
        seen: set[str] = set()
        for index, entry in enumerate(assignments):
            if not isinstance(entry, dict):
                raise ValidationError(f"flavorAssignments[{index}] must be an object")

            if "active" in entry and entry["active"] is not None:
                if not parse_bool(entry["active"], f"flavorAssignments[{index}].active"):
                    continue

            if entry.get("flavorName") is not None:
                name = require_text(entry["flavorName"], f"flavorAssignments[{index}].flavorName", max_length=128)
            elif entry.get("flavorId") is not None:
                flavor_id = parse_quantity(entry["flavorId"], f"flavorAssignments[{index}].flavorId")
                flavor = self.catalog.get_flavor_by_id(flavor_id)
                if flavor is None:
                    current_app.logger.warning("Skipping assignment for unknown flavor id %s", flavor_id)
                    continue
                name = flavor.name
            else:
                raise ValidationError(f"flavorAssignments[{index}] needs flavorName or flavorId")

            if name not in seen:
                seen.add(name)
                names.append(name)
        return names
