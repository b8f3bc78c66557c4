import logging
from django.dispatch import Signal, receiver

from .models import Lifecycle

logger = logging.getLogger(__name__)

# Sent after a creator's lifecycle status has changed and been committed.
# kwargs: creator, previous_status, status, actor
lifecycle_status_changed = Signal()


def run_sync_sweep(user_id):
    """Sweep synchronously (fallback when Redis unavailable)."""
    from django.contrib.auth.models import User
    from .services.deceased import sweep_deceased_member

    user = User.objects.filter(pk=user_id).first()
    if user is not None:
        sweep_deceased_member(user)


def run_sync_revert(user_id):
    """Revert synchronously (fallback when Redis unavailable)."""
    from django.contrib.auth.models import User
    from .services.deceased import revert_auto_resolved_consent

    user = User.objects.filter(pk=user_id).first()
    if user is not None:
        revert_auto_resolved_consent(user)


@receiver(lifecycle_status_changed)
def resolve_deceased_member_votes(sender, creator, previous_status, status, **kwargs):
    """
    Keep the votes this person owes elsewhere in line with their own lifecycle.

    Entering a deceased status sweeps their pending votes; a cancelled
    death report reverts the votes that were agreed on their behalf.
    Uses Celery when available, otherwise runs synchronously.
    """
    if status in Lifecycle.DECEASED_STATUSES:
        task_name, fallback = 'sweep_deceased_member_task', run_sync_sweep
    elif status == Lifecycle.STATUS_ACTIVE and previous_status in Lifecycle.DECEASED_STATUSES:
        task_name, fallback = 'revert_auto_resolved_consent_task', run_sync_revert
    else:
        return

    try:
        from . import tasks
        getattr(tasks, task_name).delay(creator.pk)
    except Exception as e:
        logger.warning(f"Celery unavailable, running {task_name} synchronously: {e}")
        try:
            fallback(creator.pk)
        except Exception as sync_error:
            logger.error(f"Sync {task_name} failed for user {creator.pk}: {sync_error}")
