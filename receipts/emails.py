import logging
import os

from django.conf import settings
from django.core.mail import EmailMessage
from django.template.loader import render_to_string

from core.utils import structured_log
from receipts.services import COMPLETED_ORDER_EMAIL
from receipts.signals import email_attachments

logger = logging.getLogger(__name__)


def collect_attachments(email_category: str, order, attachments=None) -> list:
    """
    Ask every ``email_attachments`` receiver for the files this email should carry.

    Each receiver returns its view of the list; new entries are merged in
    receiver order and duplicates are dropped.
    """
    collected = list(attachments or [])
    responses = email_attachments.send(
        sender=order.__class__,
        attachments=list(collected),
        email_category=email_category,
        order=order,
    )
    for _receiver, response in responses:
        for path in response or []:
            if path not in collected:
                collected.append(path)
    return collected


def send_order_completed_email(order) -> int:
    """
    Send the "order completed" email to the donor with any collected attachments.
    Returns the number of files attached.
    """
    if not order.billing_email:
        logger.warning("Order %s has no billing email; completed email not sent", order.pk)
        return 0

    paths = collect_attachments(COMPLETED_ORDER_EMAIL, order)
    attached = [p for p in paths if os.path.exists(p)]
    for missing in set(paths) - set(attached):
        logger.warning("Attachment %s for order %s does not exist; skipping", missing, order.pk)

    context = {
        "order_id": order.pk,
        "first_name": order.billing_first_name,
        "formatted_total": order.formatted_total,
        "payment_method_label": order.payment_method_title,
        "attachment_count": len(attached),
    }
    msg = EmailMessage(
        subject=f"Your donation receipt for order #{order.pk}",
        body=render_to_string(f"receipts/email/{COMPLETED_ORDER_EMAIL}.txt", context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[order.billing_email],
    )
    for path in attached:
        msg.attach_file(path, mimetype="application/pdf")
    msg.send(fail_silently=False)

    structured_log("receipt.email_sent", order_id=order.pk, email=COMPLETED_ORDER_EMAIL, attachments=len(attached))
    return len(attached)
