"""
Celery tasks for donor registration notifications.
"""

from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from prometheus_client import Counter

from .models import DonorRegistration

logger = structlog.get_logger(__name__)

REGISTRATION_EMAIL_TOTAL = Counter(
    "donor_registration_email_total",
    "Registration decision emails",
    ["status"],  # sent, not_found, skipped
)

DECISION_TEXT = {
    "approved": "has been approved. Thank you for becoming a blood donor!",
    "rejected": "could not be approved at this time. Please contact us for details.",
}


@shared_task(
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=60,
    retry_backoff_max=600,
    max_retries=3,
)
def send_registration_decision_email(registration_id: str):
    """Tell the applicant how their donor registration was decided."""
    try:
        registration = DonorRegistration.objects.get(id=registration_id)
    except DonorRegistration.DoesNotExist:
        REGISTRATION_EMAIL_TOTAL.labels(status="not_found").inc()
        logger.error("registration_email_not_found", registration_id=registration_id)
        return {"status": "not_found", "registration_id": registration_id}

    text = DECISION_TEXT.get(registration.status)
    if text is None:
        REGISTRATION_EMAIL_TOTAL.labels(status="skipped").inc()
        return {"status": "skipped", "registration_id": registration_id}

    send_mail(
        subject=f"Donor registration {registration.status}",
        message=f"Dear {registration.full_name},\n\nYour donor registration {text}\n",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[registration.email],
    )

    REGISTRATION_EMAIL_TOTAL.labels(status="sent").inc()
    logger.info(
        "registration_email_sent",
        registration_id=registration_id,
        decision=registration.status,
    )
    return {"status": "sent", "registration_id": registration_id}
