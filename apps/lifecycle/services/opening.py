"""
Opening consent: the unanimous family vote that opens a creator's note.

    death_reported --initiate_consent--> consent_gathering
    consent_gathering --(every vote agreed)--> opened
    consent_gathering --reset_consent--> death_reported

A decline never resets this vote on its own; only reset_consent does.
"""
import logging
from dataclasses import dataclass
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import FamilyMember
from ..models import Lifecycle, ConsentRecord
from . import audit
from .errors import AlreadyInProgress, InvalidStateTransition, InvalidRequest, NoEligibleVoters
from .roles import require_family_member, require_representative, can_view_all_votes
from .transitions import lock_lifecycle, get_lifecycle, fallback_metadata, announce_status_change
from .votes import get_consent_eligible_members, snapshot_voters, cast_vote, is_unanimous, tally

logger = logging.getLogger(__name__)


@dataclass
class ConsentSubmission:
    record: ConsentRecord
    opened: bool = False


def _status_of(lifecycle):
    return lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE


def open_if_unanimous(lifecycle, now=None):
    """
    Move lifecycle to opened if every opening vote agrees.

    The update is guarded on status = consent_gathering, so of any number
    of concurrent callers only one can make the transition. Must run in
    the same transaction as the vote that prompted it.

    Returns:
        bool: True if this call opened the note
    """
    if not is_unanimous(ConsentRecord, lifecycle):
        return False

    now = now or timezone.now()
    updated = Lifecycle.objects.filter(
        pk=lifecycle.pk,
        status=Lifecycle.STATUS_CONSENT_GATHERING,
    ).update(status=Lifecycle.STATUS_OPENED, opened_at=now, updated_at=now)

    if updated != 1:
        return False

    lifecycle.status = Lifecycle.STATUS_OPENED
    lifecycle.opened_at = now
    return True


def after_opened(lifecycle, performed_by=None, metadata=None):
    """Side effects of a successful open. Call after the transaction commits."""
    creator = lifecycle.creator
    logger.info(f"Note opened for creator {creator.pk} (lifecycle {lifecycle.pk})")
    audit.log_action(creator, audit.NOTE_OPENED, performed_by, lifecycle, metadata=metadata)
    audit.notify_family_of(creator, 'note_opened')
    announce_status_change(
        creator, Lifecycle.STATUS_CONSENT_GATHERING, Lifecycle.STATUS_OPENED, performed_by
    )


def initiate_consent(creator, actor):
    """
    Start the opening vote.

    Every active family member gets a pending record. Members who are
    themselves deceased are agreed on their behalf, so the vote can be
    unanimous, and open, straight away.

    Raises:
        Forbidden: actor is not a representative (and the fallback does not apply)
        AlreadyInProgress: the vote has already started
        InvalidStateTransition: no death is reported
        NoEligibleVoters: the creator has no active family members
    """
    used_fallback = require_representative(actor, creator, 'initiate-consent')

    now = timezone.now()
    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        status = _status_of(lifecycle)

        if status == Lifecycle.STATUS_CONSENT_GATHERING:
            raise AlreadyInProgress(
                'Consent gathering has already been started.',
                code='CONSENT_ALREADY_INITIATED',
            )
        if status != Lifecycle.STATUS_DEATH_REPORTED:
            raise InvalidStateTransition(current_status=status)

        members = get_consent_eligible_members(creator)
        if not members.all:
            raise NoEligibleVoters()

        ConsentRecord.objects.filter(lifecycle=lifecycle).delete()
        snapshot_voters(ConsentRecord, lifecycle, members, now)

        lifecycle.status = Lifecycle.STATUS_CONSENT_GATHERING
        lifecycle.consent_initiated_by = actor
        lifecycle.save(update_fields=['status', 'consent_initiated_by', 'updated_at'])

        opened = open_if_unanimous(lifecycle, now)

    logger.info(
        f"Consent gathering started for creator {creator.pk} by user {actor.pk}: "
        f"{len(members.eligible)} voter(s), {len(members.deceased)} auto-resolved"
    )
    audit.log_action(
        creator, audit.CONSENT_INITIATED, actor, lifecycle,
        metadata=fallback_metadata(
            used_fallback,
            voters=len(members.all),
            auto_resolved=[m.member_id for m in members.deceased],
        ),
    )
    audit.notify_family_of(
        creator, 'consent_requested',
        recipient_ids=[m.member_id for m in members.eligible],
    )
    announce_status_change(
        creator, Lifecycle.STATUS_DEATH_REPORTED, Lifecycle.STATUS_CONSENT_GATHERING, actor
    )

    if opened:
        after_opened(lifecycle, metadata={'trigger': 'initiate'})

    return lifecycle


def submit_consent(creator, actor, consented):
    """
    Record the actor's own opening vote.

    Raises:
        InvalidRequest: consented is not a boolean
        Forbidden: actor is not an active family member
        InvalidStateTransition: no vote is running
        NotFound: actor joined the family after the vote started
    """
    if not isinstance(consented, bool):
        raise InvalidRequest('consented must be true or false.')

    require_family_member(actor, creator)
    membership = FamilyMember.get_membership(creator, actor)

    now = timezone.now()
    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        status = _status_of(lifecycle)
        if status != Lifecycle.STATUS_CONSENT_GATHERING:
            raise InvalidStateTransition(current_status=status)

        record = cast_vote(ConsentRecord, lifecycle, membership, consented, now)
        opened = open_if_unanimous(lifecycle, now)

    logger.info(f"Consent submitted for creator {creator.pk} by user {actor.pk}: consented={consented}")
    audit.log_action(
        creator, audit.CONSENT_SUBMITTED, actor, lifecycle,
        metadata={'consented': consented},
    )

    if opened:
        after_opened(lifecycle, performed_by=actor)

    return ConsentSubmission(record=record, opened=opened)


def reset_consent(creator, actor):
    """
    Abandon the running vote and return to death_reported.

    Raises:
        Forbidden: actor is not a representative (and the fallback does not apply)
        InvalidStateTransition: no vote is running
    """
    used_fallback = require_representative(actor, creator, 'reset-consent')

    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        status = _status_of(lifecycle)
        if status != Lifecycle.STATUS_CONSENT_GATHERING:
            raise InvalidStateTransition(
                'There is no consent gathering to reset.', current_status=status
            )

        removed, _ = ConsentRecord.objects.filter(lifecycle=lifecycle).delete()

        lifecycle.status = Lifecycle.STATUS_DEATH_REPORTED
        lifecycle.consent_initiated_by = None
        lifecycle.save(update_fields=['status', 'consent_initiated_by', 'updated_at'])

    logger.info(f"Consent reset for creator {creator.pk} by user {actor.pk} ({removed} vote(s) removed)")
    audit.log_action(
        creator, audit.CONSENT_RESET, actor, lifecycle,
        metadata=fallback_metadata(used_fallback, removed=removed),
    )
    audit.notify_family_of(creator, 'consent_reset')
    announce_status_change(
        creator, Lifecycle.STATUS_CONSENT_GATHERING, Lifecycle.STATUS_DEATH_REPORTED, actor
    )

    return lifecycle


def get_consent_status(creator, actor):
    """
    Opening vote as visible to actor.

    Representatives, or any member when nobody represents the creator,
    see every vote. Other members see only their own.

    Returns:
        dict: status, records, my_consent, can_view_all and the tallies
    """
    role = require_family_member(actor, creator)
    lifecycle = get_lifecycle(creator)

    records = []
    if lifecycle is not None:
        records = list(
            ConsentRecord.objects.filter(lifecycle=lifecycle)
            .select_related('family_member__member')
            .order_by('id')
        )

    my_consent = next((r for r in records if r.family_member.member_id == actor.pk), None)
    can_view_all = can_view_all_votes(role, creator)

    counts = tally(records)
    return {
        'status': _status_of(lifecycle),
        'records': records if can_view_all else [r for r in [my_consent] if r],
        'my_consent': my_consent,
        'can_view_all': can_view_all,
        'total_count': counts['total_count'],
        'consented_count': counts['consented_count'],
        'pending_count': counts['pending_count'],
    }
