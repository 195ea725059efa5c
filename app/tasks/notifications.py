import logging
import os
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_invoice_email_task(self, recipient: str, subject: str, body: str, attachment_path: str = None) -> dict:
    """Log the invoice email instead of sending it; no mail transport is wired in.

    Retries while the attachment has not been written yet.
    """
    if attachment_path and not os.path.exists(attachment_path):
        raise self.retry(exc=FileNotFoundError(attachment_path))
    logger.info(
        "[Email disabled] %s to %s with attachment %s: %s",
        subject, recipient, attachment_path, body,
    )
    return {"recipient": recipient, "subject": subject, "attachment": attachment_path}
