from django.db import models, transaction
from django.utils import timezone

from orders.signals import order_completed
from orders.utils import format_money


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    billing_first_name = models.CharField(max_length=100, blank=True, default="")
    billing_last_name = models.CharField(max_length=100, blank=True, default="")
    billing_email = models.EmailField(blank=True, default="")
    total = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    payment_method_title = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["status", "created_at"], name="orders_status_created_idx")]

    def __str__(self):
        return f"Order #{self.pk} ({self.status})"

    @property
    def formatted_total(self) -> str:
        return format_money(self.total, self.currency)

    def to_snapshot(self):
        from receipts.types import OrderSnapshot

        return OrderSnapshot(
            order_id=self.pk,
            first_name=self.billing_first_name,
            last_name=self.billing_last_name,
            created_at=self.created_at,
            formatted_total=self.formatted_total,
            payment_method_label=self.payment_method_title,
        )

    def complete(self):
        """
        Mark the order completed and announce it once the transaction commits.
        Completing an already completed order is a no-op.
        """
        if self.status == self.STATUS_COMPLETED:
            return False
        self.status = self.STATUS_COMPLETED
        self.completed_at = timezone.now()
        self.save(update_fields=["status", "completed_at"])
        order_id = self.pk
        transaction.on_commit(lambda: order_completed.send(sender=Order, order_id=order_id))
        return True


def load_order_snapshot(order_id):
    """Order-store adapter: fetch an order and freeze the fields a receipt needs."""
    return Order.objects.get(pk=order_id).to_snapshot()
