"""
Celery Tasks
Background delivery of login codes.
"""

import logging
import time

from digital_menu.celery_worker import celery_app
from digital_menu.core.config import get_settings
from digital_menu.core.exceptions import UpstreamError
from digital_menu.services.notifications import get_notification_service

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(UpstreamError,),
    retry_backoff=True
)
def send_otp_email(self, email: str, code: str) -> dict:
    """
    Deliver a login code by email.

    Provider failures raise ``UpstreamError`` so Celery retries the task
    with exponential backoff.

    Args:
        email: Recipient address
        code: Plaintext one-time code

    Returns:
        dict: Provider name and message id
    """
    task_id = self.request.id
    start_time = time.time()

    service = get_notification_service()
    result = service.send_otp(email, code, ttl_minutes=get_settings().otp_ttl_minutes)
    elapsed = round(time.time() - start_time, 3)

    if not result.success:
        logger.warning(
            f"Task {task_id}: login code to {email} failed after {elapsed}s - {result.error_message}"
        )
        raise UpstreamError(result.error_message or "Email delivery failed")

    logger.info(f"Task {task_id}: login code delivered to {email} in {elapsed}s")
    return {
        'success': True,
        'provider': result.provider,
        'message_id': result.message_id,
        'processing_time_seconds': elapsed,
    }

