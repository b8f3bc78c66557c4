"""
Unanimous-vote bookkeeping shared by the opening and deletion flows.

Functions take the record model (ConsentRecord or DeletionConsentRecord)
so both flows keep separate vote namespaces with identical rules.
"""
from dataclasses import dataclass, field

from apps.accounts.models import FamilyMember
from ..models import ConsentDecision, Lifecycle
from .errors import NotFound


@dataclass
class EligibleMembers:
    """Active members split by whether they can still vote themselves."""
    eligible: list = field(default_factory=list)
    deceased: list = field(default_factory=list)

    @property
    def all(self):
        return self.eligible + self.deceased


def get_deceased_user_ids(user_ids):
    return set(
        Lifecycle.objects.filter(
            creator_id__in=user_ids,
            status__in=Lifecycle.DECEASED_STATUSES,
        ).values_list('creator_id', flat=True)
    )


def get_consent_eligible_members(creator):
    """
    Active family members of creator, split into living and deceased.

    Returns:
        EligibleMembers
    """
    memberships = list(FamilyMember.get_active_members(creator).order_by('id'))
    deceased_ids = get_deceased_user_ids([m.member_id for m in memberships])

    result = EligibleMembers()
    for membership in memberships:
        if membership.member_id in deceased_ids:
            result.deceased.append(membership)
        else:
            result.eligible.append(membership)
    return result


def snapshot_voters(record_model, lifecycle, members, now):
    """
    Create one record per member, frozen at this moment.

    Deceased members' records start out agreed and auto-resolved.
    """
    records = [
        record_model(lifecycle=lifecycle, family_member=membership)
        for membership in members.eligible
    ]
    records += [
        record_model(
            lifecycle=lifecycle,
            family_member=membership,
            decision=ConsentDecision.AGREED,
            decided_at=now,
            auto_resolved=True,
        )
        for membership in members.deceased
    ]
    return record_model.objects.bulk_create(records)


def cast_vote(record_model, lifecycle, membership, consented, now):
    """
    Record a member's own decision.

    Raises:
        NotFound: The membership is gone, or the member was not
            enfranchised when voting started
    """
    if membership is None:
        raise NotFound('Family member not found.', code='MEMBER_NOT_FOUND')

    try:
        record = record_model.objects.select_for_update().get(
            lifecycle=lifecycle, family_member=membership
        )
    except record_model.DoesNotExist:
        raise NotFound('No consent record found for you.', code='CONSENT_RECORD_NOT_FOUND')

    record.decision = ConsentDecision.AGREED if consented else ConsentDecision.DECLINED
    record.decided_at = now
    record.auto_resolved = False
    record.save(update_fields=['decision', 'decided_at', 'auto_resolved'])
    return record


def auto_resolve(record_model, lifecycle, membership, now):
    """
    Agree on behalf of a deceased member. Only a pending vote is touched.

    Returns:
        bool: True if a pending record was resolved
    """
    updated = record_model.objects.filter(
        lifecycle=lifecycle,
        family_member=membership,
        decision=ConsentDecision.PENDING,
    ).update(decision=ConsentDecision.AGREED, decided_at=now, auto_resolved=True)
    return updated > 0


def is_unanimous(record_model, lifecycle):
    """True when at least one record exists and every record agrees."""
    records = record_model.objects.filter(lifecycle=lifecycle)
    return records.exists() and not records.exclude(decision=ConsentDecision.AGREED).exists()


def tally(records):
    """Counts for a list of records."""
    records = list(records)
    consented = sum(1 for r in records if r.decision == ConsentDecision.AGREED)
    pending = sum(1 for r in records if r.decision == ConsentDecision.PENDING)
    return {
        'total_count': len(records),
        'consented_count': consented,
        'pending_count': pending,
        'all_consented': bool(records) and consented == len(records),
    }
