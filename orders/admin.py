from django.contrib import admin, messages

from receipts.emails import send_order_completed_email
from receipts.services import backfill_receipts, get_receipt_service
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    actions = ["generate_receipt", "send_completed_email"]
    list_display = ("id", "billing_first_name", "billing_last_name", "total", "currency", "status", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("id", "billing_first_name", "billing_last_name", "billing_email")
    readonly_fields = ("created_at", "completed_at")

    @admin.action(description="Generate tax receipt")
    def generate_receipt(self, request, queryset):
        counts = backfill_receipts(get_receipt_service(), queryset)
        self.message_user(
            request,
            f"Generated {counts['generated']} receipt(s); {counts['skipped']} already existed.",
        )

    @admin.action(description="Send completed email")
    def send_completed_email(self, request, queryset):
        sent = 0
        for order in queryset:
            try:
                send_order_completed_email(order)
                sent += 1
            except Exception as e:
                self.message_user(request, f"Order {order.pk}: {e}", level=messages.ERROR)
        self.message_user(request, f"Sent {sent} email(s).")
