"""
Verified-purchase reviews.

A customer may review a product once, and only after a paid or completed
order of theirs contains it.
"""
import logging
from typing import List, Optional

from django.db import IntegrityError, transaction

from apps.orders.services import find_reviewable_order

from .dtos import ReviewDTO, ReviewEligibilityDTO
from .models import Review

logger = logging.getLogger(__name__)

MIN_COMMENT_LENGTH = 10
TITLE_FALLBACK_LENGTH = 50


class ReviewNotAllowed(ValueError):
    """The customer has no paid order containing the product."""
    pass


class DuplicateReviewError(ValueError):
    pass


def _to_dto(review: Review, viewer_id: Optional[str] = None) -> ReviewDTO:
    return ReviewDTO(
        id=review.id,
        product_id=review.product_id,
        rating=review.rating,
        title=review.title or review.comment[:TITLE_FALLBACK_LENGTH],
        comment=review.comment,
        author=review.author_name or 'Customer',
        verified=review.verified_purchase,
        helpful=review.helpful_count,
        created_at=review.created_at,
        is_own_review=bool(viewer_id) and review.user_id == viewer_id,
    )


def can_review(user_id: str, product_id: str) -> ReviewEligibilityDTO:
    order = find_reviewable_order(user_id, product_id)
    if order is None:
        return ReviewEligibilityDTO(can_review=False, reason='Product not purchased')

    existing = Review.objects.filter(user_id=user_id, product_id=product_id).first()
    if existing:
        return ReviewEligibilityDTO(can_review=False, reason='Already reviewed', review_id=existing.id)

    return ReviewEligibilityDTO(can_review=True, order_id=order.id, order_number=order.order_number)


def submit_review(
    user_id: str,
    product_id: str,
    order_id: int,
    rating: int,
    comment: str,
    title: str = '',
    author_name: str = '',
) -> ReviewDTO:
    """
    Raises:
        ValueError: missing fields, rating outside 1-5, comment too short
        ReviewNotAllowed: the order is not a paid order of this user with the product
        DuplicateReviewError: the user already reviewed the product
    """
    comment = (comment or '').strip()
    if not product_id or not order_id or not rating or not comment:
        raise ValueError("Missing required fields")
    if not 1 <= rating <= 5:
        raise ValueError("Rating must be between 1 and 5")
    if len(comment) < MIN_COMMENT_LENGTH:
        raise ValueError(f"Review must be at least {MIN_COMMENT_LENGTH} characters")

    order = find_reviewable_order(user_id, product_id, order_id=order_id)
    if order is None:
        raise ReviewNotAllowed("You cannot review this product (not purchased or order not completed)")

    if Review.objects.filter(user_id=user_id, product_id=product_id).exists():
        raise DuplicateReviewError("You have already reviewed this product")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                user_id=user_id,
                author_name=author_name or '',
                product_id=product_id,
                order_id=order.id,
                rating=rating,
                title=(title or '').strip(),
                comment=comment,
                verified_purchase=True,
            )
    except IntegrityError:
        raise DuplicateReviewError("You have already reviewed this product")

    logger.info("Review %s submitted for %s (%s/5)", review.id, product_id, rating)
    return _to_dto(review, viewer_id=user_id)


def list_product_reviews(product_id: str, viewer_id: Optional[str] = None) -> List[ReviewDTO]:
    """Newest first. `viewer_id` flags the caller's own review."""
    reviews = Review.objects.filter(product_id=product_id).order_by('-created_at')
    return [_to_dto(r, viewer_id) for r in reviews]


def delete_review(user_id: str, review_id: int) -> bool:
    """Delete the caller's own review. False when it does not exist or belongs to someone else."""
    deleted, _ = Review.objects.filter(id=review_id, user_id=user_id).delete()
    return deleted > 0
