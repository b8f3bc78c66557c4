"""
Lifecycle store: reading a creator's lifecycle and the death-report edges.

    active --report_death--> death_reported --cancel_death_report--> active

Consent and deletion edges live in opening.py and deletion.py. Every
status change is announced through the lifecycle_status_changed signal
after its transaction commits.
"""
import logging
from dataclasses import dataclass
from django.db import transaction
from django.utils import timezone

from ..models import Lifecycle, ConsentRecord
from ..signals import lifecycle_status_changed
from . import audit
from .errors import InvalidStateTransition
from .roles import require_related_party, require_family_member, require_representative, has_active_representative

logger = logging.getLogger(__name__)


@dataclass
class LifecycleState:
    """A creator's lifecycle as seen by a caller. lifecycle is None while active."""
    lifecycle: Lifecycle = None
    has_representative: bool = False

    @property
    def status(self):
        return self.lifecycle.status if self.lifecycle else Lifecycle.STATUS_ACTIVE


@dataclass
class DeathReport:
    lifecycle: Lifecycle
    already_reported: bool = False


def get_lifecycle(creator):
    return Lifecycle.objects.filter(creator=creator).first()


def lock_lifecycle(creator):
    """Fetch the creator's lifecycle row for update. Call inside a transaction."""
    return Lifecycle.objects.select_for_update().filter(creator=creator).first()


def fallback_metadata(used_fallback, **extra):
    metadata = dict(extra)
    if used_fallback:
        metadata['fallback'] = True
    return metadata or None


def announce_status_change(creator, previous_status, status, actor=None):
    """Send lifecycle_status_changed; receiver failures are logged, never raised."""
    if previous_status == status:
        return
    responses = lifecycle_status_changed.send_robust(
        sender=Lifecycle,
        creator=creator,
        previous_status=previous_status,
        status=status,
        actor=actor,
    )
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(f"Lifecycle signal receiver {receiver} failed for creator {creator.pk}: {response}")


def get_lifecycle_state(creator, actor):
    """Lifecycle of creator as visible to any related party."""
    require_related_party(actor, creator)
    return LifecycleState(
        lifecycle=get_lifecycle(creator),
        has_representative=has_active_representative(creator),
    )


def report_death(creator, actor):
    """
    Report the creator's death.

    Idempotent while the death is already reported: the existing record is
    returned unchanged and nothing is logged twice.

    Raises:
        Forbidden: actor is not an active family member
        InvalidStateTransition: lifecycle is past death_reported
    """
    require_family_member(actor, creator)

    now = timezone.now()
    with transaction.atomic():
        lifecycle, _ = Lifecycle.objects.select_for_update().get_or_create(creator=creator)

        if lifecycle.status == Lifecycle.STATUS_DEATH_REPORTED:
            return DeathReport(lifecycle=lifecycle, already_reported=True)
        if lifecycle.status != Lifecycle.STATUS_ACTIVE:
            raise InvalidStateTransition(current_status=lifecycle.status)

        previous_status = lifecycle.status
        lifecycle.status = Lifecycle.STATUS_DEATH_REPORTED
        lifecycle.death_reported_at = now
        lifecycle.death_reported_by = actor
        lifecycle.save(update_fields=['status', 'death_reported_at', 'death_reported_by', 'updated_at'])

    logger.info(f"Death reported for creator {creator.pk} by user {actor.pk}")
    audit.log_action(creator, audit.DEATH_REPORTED, actor, lifecycle)
    audit.notify_family_of(creator, 'death_reported')
    announce_status_change(creator, previous_status, lifecycle.status, actor)

    return DeathReport(lifecycle=lifecycle)


def cancel_death_report(creator, actor):
    """
    Withdraw a death report, returning the creator to active.

    Clears the report's provenance and any leftover opening votes.

    Raises:
        Forbidden: actor is not a representative (and the fallback does not apply)
        InvalidStateTransition: no death is currently reported
    """
    used_fallback = require_representative(actor, creator, 'cancel-death-report')

    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        if lifecycle is None or lifecycle.status != Lifecycle.STATUS_DEATH_REPORTED:
            raise InvalidStateTransition(
                current_status=lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE
            )

        ConsentRecord.objects.filter(lifecycle=lifecycle).delete()

        previous_status = lifecycle.status
        lifecycle.status = Lifecycle.STATUS_ACTIVE
        lifecycle.death_reported_at = None
        lifecycle.death_reported_by = None
        lifecycle.save(update_fields=['status', 'death_reported_at', 'death_reported_by', 'updated_at'])

    logger.info(f"Death report cancelled for creator {creator.pk} by user {actor.pk}")
    audit.log_action(
        creator, audit.DEATH_REPORT_CANCELLED, actor, lifecycle,
        metadata=fallback_metadata(used_fallback),
    )
    audit.notify_family_of(creator, 'death_report_cancelled')
    announce_status_change(creator, previous_status, lifecycle.status, actor)

    return lifecycle
