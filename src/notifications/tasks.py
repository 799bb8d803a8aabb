"""Celery tasks for notification delivery."""

import typing as t
from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils import timezone

from notifications.enums import DeliveryStatus
from notifications.models import Notification

logger = structlog.get_logger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_notification_email(self: t.Any, notification_id: str) -> str:
    """Render a notification's email templates and send it.

    SMTP failures are retried; after the last retry the notification is marked failed.
    """
    notification = Notification.objects.select_related("user").get(pk=notification_id)
    if notification.email_status == DeliveryStatus.SENT:
        return DeliveryStatus.SENT

    context = {**notification.context, "user": notification.user, "site_name": settings.SITE_NAME}
    template_base = f"notifications/email/{notification.notification_type}"
    message = EmailMultiAlternatives(
        subject=notification.title,
        body=render_to_string(f"{template_base}.txt", context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[notification.user.email],
    )
    message.attach_alternative(render_to_string(f"{template_base}.html", context), "text/html")

    try:
        message.send()
    except SMTPException as exc:
        if self.request.retries >= self.max_retries:
            notification.email_status = DeliveryStatus.FAILED
            notification.save(update_fields=["email_status", "updated_at"])
            logger.error("notification_email_failed", notification_id=notification_id, error=str(exc))
            return DeliveryStatus.FAILED
        logger.warning("notification_email_retry", notification_id=notification_id, error=str(exc))
        raise self.retry(exc=exc)

    notification.email_status = DeliveryStatus.SENT
    notification.sent_at = timezone.now()
    notification.save(update_fields=["email_status", "sent_at", "updated_at"])
    logger.info("notification_email_sent", notification_id=notification_id)
    return DeliveryStatus.SENT
