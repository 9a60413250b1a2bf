import json
import logging


structured_logger = logging.getLogger("structured")


def structured_log(action: str, level: int = logging.INFO, **fields):
    """
    Emit a JSON log line with a consistent 'action' field for downstream ingestion,
    e.g. ``{"action": "receipt.generated", "order_id": 1001, "path": "..."}``.
    Values JSON cannot encode are logged via ``str()``.
    """
    record = {"action": action, **fields}
    try:
        line = json.dumps(record, default=str)
    except (TypeError, ValueError):
        # circular structures and similar; keep the line, lose the JSON
        line = repr(record)
    structured_logger.log(level, line)
