"""
Celery tasks for blood request notifications.
"""

from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from prometheus_client import Counter

from apps.accounts.models import Profile

from .models import BloodRequest

logger = structlog.get_logger(__name__)

REQUEST_EMAIL_TOTAL = Counter(
    "blood_request_email_total",
    "Blood request status emails",
    ["status"],  # sent, not_found, no_requester
)

STATUS_TEXT = {
    "approved": "has been approved and is being prepared.",
    "cancelled": "has been cancelled.",
    "fulfilled": "has been fulfilled.",
}


@shared_task(
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=60,
    retry_backoff_max=600,
    max_retries=3,
)
def send_request_status_email(request_id: str):
    """Tell the requester about a status change of their blood request."""
    try:
        blood_request = BloodRequest.objects.get(id=request_id)
    except BloodRequest.DoesNotExist:
        REQUEST_EMAIL_TOTAL.labels(status="not_found").inc()
        logger.error("request_email_not_found", request_id=request_id)
        return {"status": "not_found", "request_id": request_id}

    requester = None
    if blood_request.requester_id:
        requester = Profile.objects.filter(pk=blood_request.requester_id).first()
    if requester is None or blood_request.status not in STATUS_TEXT:
        REQUEST_EMAIL_TOTAL.labels(status="no_requester").inc()
        return {"status": "skipped", "request_id": request_id}

    lines = [
        f"Dear {requester.full_name},",
        "",
        f"Your request of {blood_request.quantity} unit(s) of {blood_request.blood_type} "
        f"for {blood_request.patient_name} {STATUS_TEXT[blood_request.status]}",
    ]
    if blood_request.status == "fulfilled":
        lines.append(f"Units provided: {blood_request.fulfilled_quantity}")

    send_mail(
        subject=f"Blood request {blood_request.status}",
        message="\n".join(lines) + "\n",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[requester.email],
    )

    REQUEST_EMAIL_TOTAL.labels(status="sent").inc()
    logger.info(
        "request_email_sent",
        request_id=request_id,
        request_status=blood_request.status,
    )
    return {"status": "sent", "request_id": request_id}
