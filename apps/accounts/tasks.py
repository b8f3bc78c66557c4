"""
Celery tasks for notification emails.
"""
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


@shared_task
def send_notification_email(notification_id):
    """
    Mirror an in-app notification to the recipient's inbox.
    """
    from .models import Notification

    try:
        notification = Notification.objects.select_related(
            'recipient', 'related_creator'
        ).get(id=notification_id)
    except Notification.DoesNotExist:
        return f"Notification {notification_id} not found"

    if notification.email_sent_at:
        return f"Notification {notification_id} already emailed"

    recipient = notification.recipient
    if not recipient.email:
        return f"Recipient of {notification_id} has no email"

    context = {
        'recipient_name': recipient.get_full_name() or recipient.email,
        'title': notification.title,
        'message': notification.message,
        'site_url': getattr(settings, 'SITE_URL', 'http://localhost:8000'),
    }

    html_message = render_to_string('accounts/emails/notification.html', context)
    plain_message = render_to_string('accounts/emails/notification.txt', context)

    send_mail(
        subject=f"[Keepsake] {notification.title}",
        message=plain_message,
        html_message=html_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient.email],
        fail_silently=False,
    )

    notification.email_sent_at = timezone.now()
    notification.save(update_fields=['email_sent_at'])

    logger.info(f"Notification email sent to {recipient.email}")
    return f"Email sent to {recipient.email}"
