import logging

from django.dispatch import Signal

from orders.signals import order_completed

logger = logging.getLogger(__name__)

# Sent while an outgoing order email is assembled. Receivers get
# ``attachments`` (list of file paths), ``email_category`` and ``order`` and
# return the attachment list they want the email to carry.
email_attachments = Signal()

GENERATE_UID = "receipts.generate_on_order_completed"
SEND_EMAIL_UID = "receipts.send_email_on_order_completed"
ATTACH_UID = "receipts.email_attachments"


def send_completed_email(sender, order_id=None, **kwargs):
    """Email the donor once the order is complete (after its receipt has been written)."""
    if not order_id:
        return None
    from orders.models import Order
    from receipts.emails import send_order_completed_email

    return send_order_completed_email(Order.objects.get(pk=order_id))


def connect_receipt_service(service, generate_on_complete: bool = True, send_email_on_complete: bool = True):
    """
    Hook ``service`` into the order and email events.

    Any previously connected service is disconnected first, so this can be
    called again to swap implementations. Receivers run in connection order,
    so the receipt exists before the completed email is built.
    """
    disconnect_receipt_service()

    def on_order_completed(sender, order_id=None, **kwargs):
        try:
            return service.generate(order_id)
        except OSError:
            logger.exception("Could not write donation receipt for order %s", order_id)
            raise

    def on_email_attachments(sender, attachments=None, email_category=None, order=None, **kwargs):
        return service.list_email_attachments(attachments or [], email_category, order)

    if generate_on_complete:
        order_completed.connect(on_order_completed, weak=False, dispatch_uid=GENERATE_UID)
    if send_email_on_complete:
        order_completed.connect(send_completed_email, dispatch_uid=SEND_EMAIL_UID)
    email_attachments.connect(on_email_attachments, weak=False, dispatch_uid=ATTACH_UID)


def disconnect_receipt_service():
    order_completed.disconnect(dispatch_uid=GENERATE_UID)
    order_completed.disconnect(dispatch_uid=SEND_EMAIL_UID)
    email_attachments.disconnect(dispatch_uid=ATTACH_UID)
