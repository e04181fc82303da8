"""API Router for Reviews app."""
from typing import List
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.identity.permissions import get_request_user, require_user

from . import services
from .schemas import ReviewEligibilityOut, ReviewIn, ReviewOut

router = Router(tags=["Reviews"])


@router.get("/can-review/{product_id}", response=ReviewEligibilityOut, auth=None)
def can_review(request: HttpRequest, product_id: str):
    user = require_user(request)
    return ReviewEligibilityOut(**services.can_review(user.id, product_id).__dict__)


@router.post("/", response={201: ReviewOut}, auth=None)
def submit_review(request: HttpRequest, payload: ReviewIn):
    user = require_user(request)
    try:
        review = services.submit_review(
            user_id=user.id,
            product_id=payload.product_id,
            order_id=payload.order_id,
            rating=payload.rating,
            comment=payload.comment,
            title=payload.title,
            author_name=user.name,
        )
    except services.ReviewNotAllowed as e:
        raise HttpError(403, str(e))
    except services.DuplicateReviewError as e:
        raise HttpError(409, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, ReviewOut(**review.__dict__)


@router.get("/product/{product_id}", response=List[ReviewOut], auth=None)
def product_reviews(request: HttpRequest, product_id: str):
    """Public; a signed-in caller sees their own review flagged."""
    viewer = get_request_user(request)
    reviews = services.list_product_reviews(product_id, viewer_id=viewer.id if viewer else None)
    return [ReviewOut(**r.__dict__) for r in reviews]


@router.delete("/{review_id}", auth=None)
def delete_review(request: HttpRequest, review_id: int):
    user = require_user(request)
    if not services.delete_review(user.id, review_id):
        raise HttpError(404, "Review not found or not authorized")
    return {"success": True}
