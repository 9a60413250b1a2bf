from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase

from orders.models import Order, load_order_snapshot
from orders.signals import order_completed
from receipts.signals import disconnect_receipt_service, connect_receipt_service
from receipts.services import get_receipt_service
from receipts.types import OrderSnapshot


class OrderSnapshotTests(TestCase):
    def setUp(self):
        self.created = datetime(2024, 3, 15, 12, 0, tzinfo=dt_timezone.utc)
        self.order = Order.objects.create(
            billing_first_name="Jane",
            billing_last_name="Doe",
            total=Decimal("1250.5"),
            currency="USD",
            payment_method_title="Credit Card",
            created_at=self.created,
        )

    def test_to_snapshot(self):
        snap = self.order.to_snapshot()
        self.assertIsInstance(snap, OrderSnapshot)
        self.assertEqual(snap.order_id, self.order.pk)
        self.assertEqual(snap.full_name, "Jane Doe")
        self.assertEqual(snap.created_at, self.created)
        self.assertEqual(snap.formatted_total, "$1,250.50")
        self.assertEqual(snap.payment_method_label, "Credit Card")

    def test_loader(self):
        self.assertEqual(load_order_snapshot(self.order.pk), self.order.to_snapshot())

    def test_loader_unknown_order(self):
        with self.assertRaises(Order.DoesNotExist):
            load_order_snapshot(self.order.pk + 1)


class OrderCompleteTests(TestCase):
    def setUp(self):
        # Observe the signal on its own, without receipts being written.
        disconnect_receipt_service()
        self.addCleanup(lambda: connect_receipt_service(get_receipt_service()))

        self.received = []

        def receiver(sender, order_id=None, **kwargs):
            self.received.append(order_id)

        order_completed.connect(receiver, dispatch_uid="test.order_completed")
        self.addCleanup(order_completed.disconnect, dispatch_uid="test.order_completed")
        self._receiver = receiver

        self.order = Order.objects.create(total=Decimal("10"), payment_method_title="Cash")

    def test_complete_sends_signal_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            self.assertTrue(self.order.complete())
            self.assertEqual(self.received, [])
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(self.received, [self.order.pk])

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_COMPLETED)
        self.assertIsNotNone(self.order.completed_at)

    def test_completing_twice_sends_once(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.order.complete()
            self.assertFalse(self.order.complete())
        self.assertEqual(self.received, [self.order.pk])
