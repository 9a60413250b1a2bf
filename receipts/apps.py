from django.apps import AppConfig
from django.conf import settings


class ReceiptsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'receipts'

    def ready(self):
        from .services import get_receipt_service
        from .signals import connect_receipt_service

        connect_receipt_service(
            get_receipt_service(),
            generate_on_complete=getattr(settings, "RECEIPTS_GENERATE_ON_COMPLETE", True),
            send_email_on_complete=getattr(settings, "RECEIPTS_SEND_COMPLETED_EMAIL", True),
        )
