import logging
import os
import tempfile
from datetime import date, datetime, time

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import dateformat, timezone
from django.utils.module_loading import import_string
from django.utils.text import slugify

from core.metrics import receipt_attachments_total, receipts_generated_total, receipts_skipped_total
from core.utils import structured_log
from receipts.renderers import render_pdf
from receipts.types import OrderSnapshot

logger = logging.getLogger(__name__)

RECEIPT_PREFIX = "tax-receipt"
COMPLETED_ORDER_EMAIL = "customer_completed_order"
TEMPLATE_NAME = "receipts/tax_receipt.html"


def _local(value):
    if isinstance(value, datetime) and timezone.is_aware(value):
        return timezone.localtime(value)
    return value


def _as_datetime(value):
    # dateformat only accepts time specifiers (H, i, A, ...) on datetimes
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


class ReceiptService:
    """
    Builds donation tax receipts.

    Each order gets at most one PDF, written under ``<base_dir>/<subdir>`` at a
    path derived only from the order id, the donor's name and the order date.
    The service holds no state beyond its configuration; the filesystem is the
    record of which receipts exist.
    """

    def __init__(
        self,
        base_dir,
        subdir: str = "receipts",
        renderer=render_pdf,
        email_category: str = COMPLETED_ORDER_EMAIL,
        date_format: str = "F j, Y",
        template_name: str = TEMPLATE_NAME,
        order_loader=None,
    ):
        self.base_dir = str(base_dir)
        self.subdir = subdir
        self.renderer = renderer
        self.email_category = email_category
        self.date_format = date_format
        self.template_name = template_name
        self.order_loader = order_loader

    @property
    def receipts_dir(self) -> str:
        return os.path.join(self.base_dir, self.subdir)

    def derive_path(self, order_id, full_name: str, created_at) -> str:
        day = _local(created_at).strftime("%Y-%m-%d")
        parts = [RECEIPT_PREFIX, slugify(str(order_id)), slugify(full_name or ""), slugify(day)]
        return os.path.join(self.receipts_dir, "-".join(parts) + ".pdf")

    def path_for(self, snapshot: OrderSnapshot) -> str:
        return self.derive_path(snapshot.order_id, snapshot.full_name, snapshot.created_at)

    def render_html(self, snapshot: OrderSnapshot) -> str:
        context = {
            "formatted_total": snapshot.formatted_total,
            "payment_method_label": snapshot.payment_method_label,
            "formatted_created_at": dateformat.format(_as_datetime(_local(snapshot.created_at)), self.date_format),
        }
        return render_to_string(self.template_name, context)

    def generate(self, order_id, snapshot: OrderSnapshot | None = None):
        """
        Write the receipt for ``order_id`` unless it already exists.

        Returns the receipt path, or None when there is no order id. Errors
        creating the directory or writing the file propagate to the caller.
        """
        if not order_id:
            logger.debug("Skipping receipt generation: no order id (%r)", order_id)
            receipts_skipped_total.labels(reason="no_order_id").inc()
            return None

        if snapshot is None:
            if self.order_loader is None:
                raise ValueError("No order snapshot given and no order_loader configured")
            snapshot = self.order_loader(order_id)

        if str(snapshot.order_id) != str(order_id):
            raise ValueError(f"Snapshot is for order {snapshot.order_id!r}, not {order_id!r}")

        path = self.path_for(snapshot)
        if os.path.exists(path):
            receipts_skipped_total.labels(reason="exists").inc()
            structured_log("receipt.skipped", order_id=order_id, path=path, reason="exists")
            return path

        html = self.render_html(snapshot)
        pdf = self.renderer(html, page_size="A4", orientation="portrait")

        os.makedirs(os.path.dirname(path), exist_ok=True)
        self._write_atomic(path, pdf)

        receipts_generated_total.inc()
        structured_log("receipt.generated", order_id=order_id, path=path, size=len(pdf))
        return path

    @staticmethod
    def _write_atomic(path: str, content: bytes):
        # Only a complete file may ever appear at ``path``: it is what marks the receipt as done.
        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), prefix=".tax-receipt-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            raise

    def list_email_attachments(self, attachments, email_category, order):
        if email_category != self.email_category:
            return attachments

        snapshot = order if isinstance(order, OrderSnapshot) else order.to_snapshot()
        path = self.path_for(snapshot)
        receipt_attachments_total.labels(email=email_category).inc()
        structured_log("receipt.attached", order_id=snapshot.order_id, email=email_category, path=path)
        return [*attachments, path]


def get_receipt_service() -> ReceiptService:
    """Build the project's receipt service from settings."""
    from orders.models import load_order_snapshot

    renderer = getattr(settings, "RECEIPT_PDF_RENDERER", "receipts.renderers.render_pdf")
    if isinstance(renderer, str):
        renderer = import_string(renderer)

    return ReceiptService(
        base_dir=settings.MEDIA_ROOT,
        subdir=getattr(settings, "RECEIPTS_SUBDIR", "receipts"),
        renderer=renderer,
        email_category=getattr(settings, "RECEIPT_EMAIL_CATEGORY", COMPLETED_ORDER_EMAIL),
        date_format=getattr(settings, "RECEIPT_DATE_FORMAT", "F j, Y"),
        order_loader=load_order_snapshot,
    )


def backfill_receipts(service: ReceiptService, orders) -> dict:
    """Generate missing receipts for ``orders``; returns generated/skipped counts."""
    counts = {"generated": 0, "skipped": 0}
    for order in orders:
        snapshot = order.to_snapshot()
        if os.path.exists(service.path_for(snapshot)):
            counts["skipped"] += 1
            continue
        service.generate(order.pk, snapshot)
        counts["generated"] += 1
    structured_log("receipt.backfill", **counts)
    return counts
