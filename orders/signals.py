from django.dispatch import Signal

# Sent once an order transitions to "completed". Receivers get ``order_id``.
order_completed = Signal()
