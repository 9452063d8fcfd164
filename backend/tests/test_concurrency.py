# Overview: Threaded tests for the per-store critical sections on a file-backed database.

"""
Concurrency tests.

Runs real threads against a temporary SQLite file (an in-memory database
shares one connection across threads, which would hide the races).
"""
import os
import tempfile
import threading
import unittest

from heladeria import create_app
from heladeria.extensions import db
from heladeria.models import Flavor, StoreFlavor, Order, OrderItem
from heladeria.services import get_services


class StoreFlavorConcurrencyTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "concurrency.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
            "AUTO_CREATE_SCHEMA": False,
            "SEED_DEFAULT_FLAVORS": False,
            "BASE_STORE": "puesto",
            "DERIVED_STORES": ["puesto2"],
        })

        with self.app.app_context():
            db.drop_all()
            db.create_all()
            names = [f"Sabor {i:02d}" for i in range(20)]
            db.session.add_all([Flavor(name=name, price_cents=1200) for name in names])
            db.session.add_all([StoreFlavor(store_name="puesto", flavor_name=name) for name in names])
            db.session.commit()
        self.names = names

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def _run_threads(self, target, count):
        errors = []
        lock = threading.Lock()

        def worker(index):
            with self.app.app_context():
                try:
                    target(index)
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return errors

    def test_simultaneous_first_reads_copy_once(self):
        seen = []
        lock = threading.Lock()

        def read(_index):
            rows = get_services().store_flavors.get_active_flavors("puesto2")
            with lock:
                seen.append(sum(row["store_active"] for row in rows))

        errors = self._run_threads(read, 8)

        self.assertFalse(errors)
        self.assertEqual(seen, [len(self.names)] * 8)
        with self.app.app_context():
            count = db.session.query(StoreFlavor).filter_by(store_name="puesto2").count()
        self.assertEqual(count, len(self.names))

    def test_readers_never_see_partial_replace(self):
        replacement = [{"flavorName": name} for name in self.names[:10]]
        full = [{"flavorName": name} for name in self.names]
        seen = []
        lock = threading.Lock()

        def mixed(index):
            service = get_services().store_flavors
            if index % 2 == 0:
                service.set_active_flavors("puesto", replacement if index % 4 == 0 else full)
            else:
                rows = service.get_active_flavors("puesto")
                with lock:
                    seen.append(sum(row["store_active"] for row in rows))

        errors = self._run_threads(mixed, 12)

        self.assertFalse(errors)
        for active in seen:
            self.assertIn(active, (10, len(self.names)))

    def test_concurrent_orders_keep_their_items(self):
        def submit(index):
            get_services().orders.create_order({
                "total": 24,
                "items": [
                    {"flavor": f"Sabor {index:02d}", "quantity": 1, "price": 12},
                    {"flavor": "Sabor 00", "quantity": 1, "price": 12},
                ],
            })

        errors = self._run_threads(submit, 10)

        self.assertFalse(errors)
        with self.app.app_context():
            self.assertEqual(db.session.query(Order).count(), 10)
            self.assertEqual(db.session.query(OrderItem).count(), 20)


if __name__ == "__main__":
    unittest.main()
