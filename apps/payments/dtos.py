"""DTOs for Payments app."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class NotificationResultDTO:
    order_number: str
    payment_status: str
    order_status: str
    payment_id: str
    supplier_task_id: Optional[str] = None
