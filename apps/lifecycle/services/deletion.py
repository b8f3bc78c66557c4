"""
Deletion consent: the unanimous family vote that erases an opened note.

Runs on deletion_status while status stays opened. A single decline
ends the vote at once. Unanimity erases the creator's content, every
vote, and the lifecycle itself, in one transaction.
"""
import logging
from dataclasses import dataclass
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import FamilyMember
from apps.records.services import erase_creator_content
from ..models import Lifecycle, ConsentRecord, DeletionConsentRecord
from . import audit
from .errors import AlreadyInProgress, InvalidStateTransition, InvalidRequest, NoEligibleVoters
from .roles import require_family_member, require_representative, ROLE_REPRESENTATIVE
from .transitions import lock_lifecycle, get_lifecycle
from .votes import get_consent_eligible_members, snapshot_voters, cast_vote, is_unanimous, tally

logger = logging.getLogger(__name__)


@dataclass
class Erasure:
    """What a terminal deletion removed. Recipients were captured before erasure."""
    creator_id: int
    recipient_ids: list
    audio_deleted: int = 0
    conversations_deleted: int = 0


@dataclass
class DeletionConsentSubmission:
    record: DeletionConsentRecord = None
    declined: bool = False
    erased: bool = False


def erase_if_unanimous(lifecycle):
    """
    Erase the creator's data if every deletion vote agrees.

    lifecycle must be locked (select_for_update) by the caller's
    transaction, which makes the check and the erasure one step.

    Returns:
        Erasure or None
    """
    if not lifecycle.is_deletion_gathering:
        return None
    if not is_unanimous(DeletionConsentRecord, lifecycle):
        return None

    creator = lifecycle.creator
    recipient_ids = list(
        FamilyMember.get_active_members(creator).values_list('member_id', flat=True)
    )

    counts = erase_creator_content(creator)
    DeletionConsentRecord.objects.filter(lifecycle=lifecycle).delete()
    ConsentRecord.objects.filter(lifecycle=lifecycle).delete()
    lifecycle.delete()

    return Erasure(
        creator_id=creator.pk,
        recipient_ids=recipient_ids,
        audio_deleted=counts['audio_deleted'],
        conversations_deleted=counts['conversations_deleted'],
    )


def after_erased(creator, erasure, performed_by=None):
    """Side effects of a terminal deletion. Call after the transaction commits."""
    logger.info(
        f"Data deleted for creator {creator.pk}: {erasure.conversations_deleted} conversation(s), "
        f"{erasure.audio_deleted} audio file(s)"
    )
    audit.log_action(
        creator, audit.DATA_DELETION_EXECUTED, performed_by,
        metadata={
            'conversations_deleted': erasure.conversations_deleted,
            'audio_deleted': erasure.audio_deleted,
        },
    )
    audit.notify_family_of(creator, 'data_deleted', recipient_ids=erasure.recipient_ids)


def initiate_data_deletion(creator, actor):
    """
    Start the deletion vote. Representatives only, with no fallback.

    Raises:
        Forbidden: actor is not a representative
        InvalidStateTransition: the note is not opened
        AlreadyInProgress: the deletion vote has already started
        NoEligibleVoters: the creator has no active family members
    """
    require_representative(actor, creator, 'initiate-data-deletion', allow_fallback=False)

    now = timezone.now()
    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        status = lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE

        if status != Lifecycle.STATUS_OPENED:
            raise InvalidStateTransition(
                'Data deletion is only possible once the note is opened.', current_status=status
            )
        if lifecycle.deletion_status == Lifecycle.DELETION_CONSENT_GATHERING:
            raise AlreadyInProgress('Data deletion consent gathering has already been started.')

        members = get_consent_eligible_members(creator)
        if not members.all:
            raise NoEligibleVoters()

        DeletionConsentRecord.objects.filter(lifecycle=lifecycle).delete()
        snapshot_voters(DeletionConsentRecord, lifecycle, members, now)

        lifecycle.deletion_status = Lifecycle.DELETION_CONSENT_GATHERING
        lifecycle.save(update_fields=['deletion_status', 'updated_at'])

        erasure = erase_if_unanimous(lifecycle)

    logger.info(
        f"Data deletion consent started for creator {creator.pk} by user {actor.pk}: "
        f"{len(members.eligible)} voter(s), {len(members.deceased)} auto-resolved"
    )
    audit.log_action(
        creator, audit.DATA_DELETION_INITIATED, actor,
        None if erasure else lifecycle,
        metadata={
            'voters': len(members.all),
            'auto_resolved': [m.member_id for m in members.deceased],
        },
    )

    if erasure:
        after_erased(creator, erasure)
        return None

    audit.notify_family_of(
        creator, 'deletion_consent_requested',
        recipient_ids=[m.member_id for m in members.eligible],
    )
    return lifecycle


def submit_deletion_consent(creator, actor, consented):
    """
    Record the actor's own deletion vote.

    A decline clears every deletion vote and deletion_status together.
    The vote that completes unanimity erases the creator's data.

    Raises:
        InvalidRequest: consented is not a boolean
        Forbidden: actor is not an active family member
        InvalidStateTransition: no deletion vote is running
        NotFound: actor joined the family after the vote started
    """
    if not isinstance(consented, bool):
        raise InvalidRequest('consented must be true or false.')

    require_family_member(actor, creator)
    membership = FamilyMember.get_membership(creator, actor)

    now = timezone.now()
    erasure = None
    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        if lifecycle is None or not lifecycle.is_deletion_gathering:
            raise InvalidStateTransition(
                'There is no data deletion consent gathering in progress.',
                current_status=lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE,
            )

        record = cast_vote(DeletionConsentRecord, lifecycle, membership, consented, now)

        if not consented:
            DeletionConsentRecord.objects.filter(lifecycle=lifecycle).delete()
            lifecycle.deletion_status = None
            lifecycle.save(update_fields=['deletion_status', 'updated_at'])
        else:
            erasure = erase_if_unanimous(lifecycle)

    if not consented:
        logger.info(f"Data deletion declined for creator {creator.pk} by user {actor.pk}; votes cleared")
        audit.log_action(creator, audit.DELETION_CONSENT_DECLINED, actor, lifecycle)
        audit.notify_family_of(creator, 'deletion_consent_declined')
        return DeletionConsentSubmission(record=None, declined=True)

    logger.info(f"Deletion consent submitted for creator {creator.pk} by user {actor.pk}")
    audit.log_action(
        creator, audit.DELETION_CONSENT_SUBMITTED, actor,
        None if erasure else lifecycle,
        metadata={'consented': True},
    )

    if erasure:
        after_erased(creator, erasure, performed_by=actor)
        return DeletionConsentSubmission(record=None, erased=True)

    return DeletionConsentSubmission(record=record)


def cancel_data_deletion(creator, actor):
    """
    Abandon the deletion vote. Representatives only, with no fallback.

    Raises:
        Forbidden: actor is not a representative
        InvalidStateTransition: no deletion vote is running
    """
    require_representative(actor, creator, 'cancel-data-deletion', allow_fallback=False)

    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        if lifecycle is None or not lifecycle.is_deletion_gathering:
            raise InvalidStateTransition(
                'There is no data deletion consent gathering to cancel.',
                current_status=lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE,
            )

        removed, _ = DeletionConsentRecord.objects.filter(lifecycle=lifecycle).delete()
        lifecycle.deletion_status = None
        lifecycle.save(update_fields=['deletion_status', 'updated_at'])

    logger.info(f"Data deletion cancelled for creator {creator.pk} by user {actor.pk}")
    audit.log_action(
        creator, audit.DATA_DELETION_CANCELLED, actor, lifecycle,
        metadata={'removed': removed},
    )
    audit.notify_family_of(creator, 'deletion_consent_cancelled')
    return lifecycle


def get_deletion_consent_status(creator, actor):
    """
    Deletion vote as visible to actor.

    Every family member sees the tallies and their own vote; only
    representatives see the per-member list.

    Returns:
        dict: deletion_status, records, my_consent and the tallies
    """
    role = require_family_member(actor, creator)
    lifecycle = get_lifecycle(creator)

    records = []
    if lifecycle is not None:
        records = list(
            DeletionConsentRecord.objects.filter(lifecycle=lifecycle)
            .select_related('family_member__member')
            .order_by('id')
        )

    my_consent = next((r for r in records if r.family_member.member_id == actor.pk), None)
    is_representative = role == ROLE_REPRESENTATIVE

    counts = tally(records)
    return {
        'status': lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE,
        'deletion_status': lifecycle.deletion_status if lifecycle else None,
        'records': records if is_representative else None,
        'my_consent': my_consent,
        'total_count': counts['total_count'],
        'consented_count': counts['consented_count'],
        'all_consented': counts['all_consented'],
    }
