import os

from django.conf import settings
from django.db import connection
from django.http import HttpResponse, JsonResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST


def health(_request):
    # DB check
    db_ok = True
    try:
        with connection.cursor() as c:
            c.execute("SELECT 1")
            c.fetchone()
    except Exception:
        db_ok = False

    # Receipts are written under MEDIA_ROOT; it must exist (or be creatable) and be writable
    media_root = str(settings.MEDIA_ROOT)
    try:
        os.makedirs(media_root, exist_ok=True)
        storage_ok = os.access(media_root, os.W_OK)
    except OSError:
        storage_ok = False

    overall_ok = db_ok and storage_ok
    return JsonResponse(
        {
            "status": "ok" if overall_ok else "degraded",
            "db": db_ok,
            "storage": storage_ok,
        },
        status=200 if overall_ok else 503,
    )

def metrics(_request):
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
