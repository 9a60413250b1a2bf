from celery import shared_task


@shared_task(bind=True, autoretry_for=(OSError,), retry_backoff=True, retry_backoff_max=300, retry_jitter=True, retry_kwargs={"max_retries": 3})
def generate_receipt_task(self, order_id):
    """
    Out-of-request receipt generation; a no-op when the receipt already exists.
    """
    from receipts.services import get_receipt_service

    return get_receipt_service().generate(order_id)


@shared_task(name="receipts.tasks.backfill_receipts_task")
def backfill_receipts_task():
    from orders.models import Order
    from receipts.services import backfill_receipts, get_receipt_service

    return backfill_receipts(get_receipt_service(), Order.objects.filter(status=Order.STATUS_COMPLETED))


@shared_task(bind=True, autoretry_for=(OSError,), retry_backoff=True, retry_kwargs={"max_retries": 3})
def send_order_completed_email_task(self, order_id):
    from orders.models import Order
    from receipts.emails import send_order_completed_email

    return send_order_completed_email(Order.objects.get(pk=order_id))
