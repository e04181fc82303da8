"""API Router for Payments app."""
import logging
from ninja import Router
from django.http import HttpRequest, HttpResponse

from . import services

logger = logging.getLogger(__name__)

router = Router(tags=["Payments"])


@router.post("/notify", auth=None)
def notify(request: HttpRequest):
    """
    PayFast ITN callback (application/x-www-form-urlencoded).
    Replies a plain "OK" once the notification is applied.
    """
    data = {key: request.POST.get(key) for key in request.POST.keys()}
    try:
        services.process_notification(data)
    except ValueError as e:
        logger.warning("Rejected payment notification: %s", e)
        return HttpResponse(str(e), status=400, content_type='text/plain')
    return HttpResponse("OK", content_type='text/plain')
