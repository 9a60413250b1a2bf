from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Union


@dataclass(frozen=True)
class OrderSnapshot:
    """The order fields a donation receipt is built from, frozen at generation time."""

    order_id: Any
    first_name: str
    last_name: str
    created_at: Union[date, datetime]
    formatted_total: str
    payment_method_label: str

    @property
    def full_name(self) -> str:
        parts = [(self.first_name or "").strip(), (self.last_name or "").strip()]
        return " ".join(p for p in parts if p)
