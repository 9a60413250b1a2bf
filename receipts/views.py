import os

from django.http import FileResponse
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound

from core.permissions import IsFinance
from orders.models import Order
from receipts.services import get_receipt_service


@api_view(["get"])
@permission_classes([IsFinance])
def order_receipt(request, order_id: int):
    order = get_object_or_404(Order, pk=order_id)
    path = get_receipt_service().path_for(order.to_snapshot())
    if not os.path.exists(path):
        raise NotFound("Receipt has not been generated for this order yet.")
    return FileResponse(
        open(path, "rb"),
        as_attachment=True,
        filename=os.path.basename(path),
        content_type="application/pdf",
    )
