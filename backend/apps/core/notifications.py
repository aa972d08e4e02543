"""
Queueing of notification tasks.
"""

import structlog
from prometheus_client import Counter

logger = structlog.get_logger(__name__)

NOTIFICATION_QUEUED_TOTAL = Counter(
    "notification_queued_total",
    "Notification tasks queued",
    ["kind", "status"],  # status: success, error
)


def queue_notification(task, kind: str, record_id):
    """
    Queue ``task`` for ``record_id``.

    A broker failure is logged and counted; the operation that triggered the
    notification has already succeeded and is not failed by it.
    """
    try:
        task.delay(str(record_id))
    except Exception as e:
        NOTIFICATION_QUEUED_TOTAL.labels(kind=kind, status="error").inc()
        logger.error(
            "notification_queue_failed",
            kind=kind,
            record_id=str(record_id),
            error=str(e),
            error_type=type(e).__name__,
        )
        return False

    NOTIFICATION_QUEUED_TOTAL.labels(kind=kind, status="success").inc()
    logger.info("notification_queued", kind=kind, record_id=str(record_id))
    return True
