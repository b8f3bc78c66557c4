"""
Celery tasks for deceased-member resolution.

Queued by the lifecycle_status_changed receiver once a status change
has committed.
"""
from celery import shared_task


@shared_task
def sweep_deceased_member_task(user_id: int):
    """Auto-resolve the votes a newly deceased user owes in other families."""
    from django.contrib.auth.models import User
    from apps.lifecycle.services.deceased import sweep_deceased_member

    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        return f"User {user_id} not found"

    outcomes = sweep_deceased_member(user)
    resolved = sum(1 for o in outcomes if o.resolved)
    failed = sum(1 for o in outcomes if o.error)
    return f"User {user_id}: {resolved} vote(s) auto-resolved, {failed} failure(s)"


@shared_task
def revert_auto_resolved_consent_task(user_id: int):
    """Return a user's auto-resolved votes to pending after their death report is withdrawn."""
    from django.contrib.auth.models import User
    from apps.lifecycle.services.deceased import revert_auto_resolved_consent

    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        return f"User {user_id} not found"

    reverted = revert_auto_resolved_consent(user)
    return f"User {user_id}: {reverted} vote(s) reverted"
