"""DTOs for Notifications app."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EmailResultDTO:
    success: bool
    error: Optional[str] = None
