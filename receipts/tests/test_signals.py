import os
from unittest import mock

from django.core import mail
from django.test import TestCase

from orders.models import Order
from orders.signals import order_completed
from receipts.emails import collect_attachments, send_order_completed_email
from receipts.signals import email_attachments
from receipts.tests.base import TempMediaMixin, make_order


class OrderCompletedGeneratesReceiptTests(TempMediaMixin, TestCase):
    def test_completing_an_order_writes_its_receipt(self):
        order = make_order(id=1001)
        with self.captureOnCommitCallbacks(execute=True):
            order.complete()

        path = os.path.join(self.media_root, "receipts", "tax-receipt-1001-jane-doe-2024-03-15.pdf")
        self.assertTrue(os.path.isfile(path))
        with open(path, "rb") as fh:
            content = fh.read().decode("utf-8")
        self.assertIn("$50.00", content)
        self.assertIn("Credit Card", content)

    def test_repeated_events_render_once(self):
        order = make_order()
        with mock.patch.object(self.service, "renderer", wraps=self.service.renderer) as renderer:
            order_completed.send(sender=Order, order_id=order.pk)
            order_completed.send(sender=Order, order_id=order.pk)
        self.assertEqual(renderer.call_count, 1)

    def test_event_without_order_id_is_ignored(self):
        responses = order_completed.send(sender=Order, order_id=0)
        self.assertEqual([r for _recv, r in responses], [None, None])
        self.assertEqual(mail.outbox, [])
        self.assertFalse(os.path.exists(os.path.join(self.media_root, "receipts")))

    def test_write_errors_reach_the_sender(self):
        order = make_order()
        with mock.patch("receipts.services.os.makedirs", side_effect=PermissionError("read-only")):
            with self.assertLogs("receipts.signals", level="ERROR"):
                with self.assertRaises(PermissionError):
                    order_completed.send(sender=Order, order_id=order.pk)

    def test_unknown_order_raises(self):
        with self.assertRaises(Order.DoesNotExist):
            order_completed.send(sender=Order, order_id=987654)


class GenerationDisabledTests(TempMediaMixin, TestCase):
    generate_on_complete = False

    def test_completion_does_not_write(self):
        order = make_order()
        with self.assertLogs("receipts.emails", level="WARNING"):
            with self.captureOnCommitCallbacks(execute=True):
                order.complete()
        self.assertFalse(os.path.exists(os.path.join(self.media_root, "receipts")))
        # the donor is still emailed, just without a receipt
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].attachments, [])

    def test_attachments_still_listed(self):
        order = make_order()
        self.assertEqual(len(collect_attachments("customer_completed_order", order)), 1)


class EmailAttachmentHookTests(TempMediaMixin, TestCase):
    def test_completed_order_email_lists_receipt(self):
        order = make_order()
        paths = collect_attachments("customer_completed_order", order, ["/tmp/terms.pdf"])
        self.assertEqual(paths, ["/tmp/terms.pdf", self.service.path_for(order.to_snapshot())])

    def test_other_emails_are_unchanged(self):
        order = make_order()
        self.assertEqual(collect_attachments("new_order", order, ["/tmp/terms.pdf"]), ["/tmp/terms.pdf"])

    def test_other_receivers_are_merged(self):
        def add_terms(sender, attachments=None, **kwargs):
            return [*attachments, "/tmp/terms.pdf"]

        email_attachments.connect(add_terms, dispatch_uid="test.add_terms")
        self.addCleanup(email_attachments.disconnect, dispatch_uid="test.add_terms")

        order = make_order()
        paths = collect_attachments("customer_completed_order", order)
        self.assertEqual(len(paths), 2)
        self.assertIn("/tmp/terms.pdf", paths)
        self.assertIn(self.service.path_for(order.to_snapshot()), paths)


class CompletedEmailTests(TempMediaMixin, TestCase):
    def test_completing_an_order_emails_the_receipt(self):
        order = make_order()
        with self.captureOnCommitCallbacks(execute=True):
            order.complete()

        self.assertEqual(len(mail.outbox), 1)
        msg = mail.outbox[0]
        self.assertEqual(msg.to, ["jane@example.com"])
        self.assertIn(str(order.pk), msg.subject)
        self.assertIn("$50.00", msg.body)
        self.assertEqual(len(msg.attachments), 1)
        filename, _content, mimetype = msg.attachments[0]
        self.assertEqual(filename, os.path.basename(self.service.path_for(order.to_snapshot())))
        self.assertEqual(mimetype, "application/pdf")

    def test_explicit_send_attaches_existing_receipt(self):
        order = make_order()
        self.service.generate(order.pk, order.to_snapshot())

        self.assertEqual(send_order_completed_email(order), 1)
        self.assertEqual(len(mail.outbox[0].attachments), 1)

    def test_missing_receipt_is_skipped(self):
        order = make_order()
        with self.assertLogs("receipts.emails", level="WARNING"):
            attached = send_order_completed_email(order)
        self.assertEqual(attached, 0)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].attachments, [])

    def test_no_billing_email(self):
        order = make_order(billing_email="")
        self.assertEqual(send_order_completed_email(order), 0)
        self.assertEqual(mail.outbox, [])


class CompletedEmailDisabledTests(TempMediaMixin, TestCase):
    send_email_on_complete = False

    def test_completion_writes_receipt_without_email(self):
        order = make_order()
        with self.captureOnCommitCallbacks(execute=True):
            order.complete()
        self.assertTrue(os.path.isfile(self.service.path_for(order.to_snapshot())))
        self.assertEqual(mail.outbox, [])
