from django.urls import path
from .views import order_receipt

urlpatterns = [
    path("orders/<int:order_id>/receipt/", order_receipt, name="order-receipt"),
]
