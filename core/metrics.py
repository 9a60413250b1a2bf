from prometheus_client import Counter

# Receipts
receipts_generated_total = Counter(
    "receipts_generated_total", "Donation receipt PDFs written to disk"
)
receipts_skipped_total = Counter(
    "receipts_skipped_total",
    "Receipt generation requests that wrote nothing",
    ["reason"],  # exists, no_order_id
)
receipt_attachments_total = Counter(
    "receipt_attachments_total", "Receipt paths added to outgoing emails", ["email"]
)

# Tasks / errors
task_failures_total = Counter(
    "task_failures_total", "Background task failures", ["task"]
)
