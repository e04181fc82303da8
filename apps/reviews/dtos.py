"""DTOs for Reviews app."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ReviewEligibilityDTO:
    can_review: bool
    reason: str = ''
    order_id: Optional[int] = None
    order_number: str = ''
    review_id: Optional[int] = None


@dataclass(frozen=True)
class ReviewDTO:
    id: int
    product_id: str
    rating: int
    title: str
    comment: str
    author: str
    verified: bool
    helpful: int
    created_at: datetime
    is_own_review: bool = False
