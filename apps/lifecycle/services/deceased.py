"""
Deceased-member resolution.

When a person's own lifecycle leaves 'active' they can no longer vote in
anyone else's family. sweep_deceased_member agrees on their behalf in
every vote they still owe, and re-runs that vote's unanimity check.
revert_auto_resolved_consent undoes this when their death report is
cancelled.

Each creator is handled in its own transaction. A failure for one
creator is logged and the sweep moves on.
"""
import logging
from dataclasses import dataclass
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import FamilyMember
from ..models import Lifecycle, ConsentDecision, ConsentRecord, DeletionConsentRecord
from . import audit
from .transitions import lock_lifecycle
from .votes import auto_resolve
from .opening import open_if_unanimous, after_opened
from .deletion import erase_if_unanimous, after_erased

logger = logging.getLogger(__name__)

FLOW_OPENING = 'opening'
FLOW_DELETION = 'deletion'


@dataclass
class SweepOutcome:
    """Result of sweeping one creator's vote for a deceased member."""
    creator_id: int
    flow: str = None
    resolved: bool = False
    opened: bool = False
    erased: bool = False
    error: str = None


def find_owed_votes(user):
    """
    Pending votes user owes in other creators' running processes.

    Returns:
        list: (creator, flow) pairs
    """
    owed = []
    for membership in FamilyMember.get_memberships_of(user):
        lifecycle = Lifecycle.objects.filter(creator_id=membership.creator_id).first()
        if lifecycle is None:
            continue

        if lifecycle.status == Lifecycle.STATUS_CONSENT_GATHERING:
            record_model, flow = ConsentRecord, FLOW_OPENING
        elif lifecycle.is_deletion_gathering:
            record_model, flow = DeletionConsentRecord, FLOW_DELETION
        else:
            continue

        if record_model.objects.filter(
            lifecycle=lifecycle, family_member=membership, decision=ConsentDecision.PENDING
        ).exists():
            owed.append((membership.creator, flow))
    return owed


def sweep_deceased_member(user):
    """
    Auto-resolve every vote a deceased user still owes.

    Returns:
        list[SweepOutcome]: one per creator whose process was running
    """
    outcomes = []
    for membership in FamilyMember.get_memberships_of(user):
        try:
            outcome = _sweep_creator(membership)
        except Exception as e:
            logger.error(
                f"Deceased-member sweep failed for member {user.pk} in creator "
                f"{membership.creator_id}: {e}"
            )
            outcome = SweepOutcome(creator_id=membership.creator_id, error=str(e))

        if outcome is not None:
            outcomes.append(outcome)

    resolved = sum(1 for o in outcomes if o.resolved)
    if outcomes:
        logger.info(f"Deceased-member sweep for user {user.pk}: {resolved}/{len(outcomes)} vote(s) auto-resolved")
    return outcomes


def _sweep_creator(membership):
    creator = membership.creator
    now = timezone.now()
    opened = False
    erasure = None

    with transaction.atomic():
        lifecycle = lock_lifecycle(creator)
        if lifecycle is None:
            return None

        if lifecycle.status == Lifecycle.STATUS_CONSENT_GATHERING:
            flow = FLOW_OPENING
            resolved = auto_resolve(ConsentRecord, lifecycle, membership, now)
            if resolved:
                opened = open_if_unanimous(lifecycle, now)
        elif lifecycle.is_deletion_gathering:
            flow = FLOW_DELETION
            resolved = auto_resolve(DeletionConsentRecord, lifecycle, membership, now)
            if resolved:
                erasure = erase_if_unanimous(lifecycle)
        else:
            return None

    outcome = SweepOutcome(
        creator_id=creator.pk,
        flow=flow,
        resolved=resolved,
        opened=opened,
        erased=erasure is not None,
    )
    if not resolved:
        return outcome

    action = audit.CONSENT_AUTO_RESOLVED if flow == FLOW_OPENING else audit.DELETION_CONSENT_AUTO_RESOLVED
    logger.info(f"Auto-resolved {flow} vote of deceased member {membership.member_id} for creator {creator.pk}")
    audit.log_action(
        creator, action,
        lifecycle=None if erasure else lifecycle,
        metadata={'member_id': membership.member_id, 'family_member_id': membership.pk},
    )

    if opened:
        after_opened(lifecycle, metadata={'trigger': 'auto_resolve', 'member_id': membership.member_id})
    if erasure:
        after_erased(creator, erasure)

    return outcome


def revert_auto_resolved_consent(user):
    """
    Put every vote that was agreed on user's behalf back to pending.

    No transition is re-run and nothing already opened is closed again.

    Returns:
        int: Number of votes reverted
    """
    reverted = 0
    flows = (
        (ConsentRecord, audit.CONSENT_AUTO_RESOLVE_REVERTED),
        (DeletionConsentRecord, audit.DELETION_CONSENT_AUTO_RESOLVE_REVERTED),
    )
    for record_model, action in flows:
        records = record_model.objects.filter(
            family_member__member=user,
            auto_resolved=True,
        ).select_related('lifecycle__creator')

        for record in records:
            try:
                with transaction.atomic():
                    updated = record_model.objects.filter(pk=record.pk, auto_resolved=True).update(
                        decision=ConsentDecision.PENDING,
                        decided_at=None,
                        auto_resolved=False,
                    )
            except Exception as e:
                logger.error(f"Failed to revert auto-resolved vote {record.pk} for user {user.pk}: {e}")
                continue

            if not updated:
                continue

            reverted += 1
            creator = record.lifecycle.creator
            logger.info(f"Reverted auto-resolved vote of member {user.pk} for creator {creator.pk}")
            audit.log_action(
                creator, action,
                lifecycle=record.lifecycle,
                metadata={'member_id': user.pk, 'family_member_id': record.family_member_id},
            )

    return reverted
