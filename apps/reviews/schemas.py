"""API Schemas for Reviews app."""
from datetime import datetime
from typing import Optional
from ninja import Schema


class ReviewEligibilityOut(Schema):
    can_review: bool
    reason: str
    order_id: Optional[int] = None
    order_number: str
    review_id: Optional[int] = None


class ReviewIn(Schema):
    product_id: str
    order_id: int
    rating: int
    comment: str
    title: str = ""


class ReviewOut(Schema):
    id: int
    product_id: str
    rating: int
    title: str
    comment: str
    author: str
    verified: bool
    helpful: int
    created_at: datetime
    is_own_review: bool
