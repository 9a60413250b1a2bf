from django.core.management.base import BaseCommand, CommandError

from orders.models import Order
from receipts.services import backfill_receipts, get_receipt_service


class Command(BaseCommand):
    help = "Generate missing donation tax receipts for completed orders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--order-id",
            type=int,
            nargs="+",
            dest="order_ids",
            default=[],
            help="Only generate receipts for these order ids.",
        )
        parser.add_argument(
            "--all-completed",
            action="store_true",
            help="Generate receipts for every completed order.",
        )

    def handle(self, *args, **options):
        order_ids = options["order_ids"]
        if not order_ids and not options["all_completed"]:
            raise CommandError("Pass --order-id ID [ID ...] or --all-completed")

        if order_ids:
            orders = list(Order.objects.filter(pk__in=order_ids))
            missing = sorted(set(order_ids) - {o.pk for o in orders})
            if missing:
                raise CommandError(f"Unknown order id(s): {', '.join(str(i) for i in missing)}")
        else:
            orders = Order.objects.filter(status=Order.STATUS_COMPLETED).order_by("pk")

        counts = backfill_receipts(get_receipt_service(), orders)
        self.stdout.write(
            self.style.SUCCESS(f"Done. Generated {counts['generated']}, skipped {counts['skipped']} existing.")
        )
