from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from apps.lifecycle.models import Lifecycle, ConsentDecision, ConsentRecord, LifecycleActionLog
from apps.lifecycle.services import audit
from apps.lifecycle.services.errors import (
    AlreadyInProgress, Forbidden, InvalidRequest, InvalidStateTransition, NoEligibleVoters, NotFound,
)
from apps.lifecycle.services.opening import (
    initiate_consent, submit_consent, reset_consent, get_consent_status, open_if_unanimous,
)
from apps.lifecycle.services.transitions import report_death
from apps.lifecycle.services.votes import EligibleMembers, cast_vote
from apps.accounts.models import Notification


@pytest.fixture
def gathering(creator, representative, member):
    report_death(creator, representative)
    return initiate_consent(creator, representative)


@pytest.mark.django_db
class TestInitiateConsent:

    def test_snapshots_active_members(self, creator, representative, member):
        report_death(creator, representative)
        lifecycle = initiate_consent(creator, representative)

        assert lifecycle.status == Lifecycle.STATUS_CONSENT_GATHERING
        assert lifecycle.consent_initiated_by == representative
        records = ConsentRecord.objects.filter(lifecycle=lifecycle)
        assert records.count() == 2
        assert all(r.decision == ConsentDecision.PENDING for r in records)

    def test_requests_consent_from_voters(self, gathering, representative, member):
        recipients = set(
            Notification.objects.filter(notification_type='consent_requested').values_list('recipient_id', flat=True)
        )
        assert recipients == {representative.id, member.id}

    def test_requires_death_reported(self, creator, representative):
        with pytest.raises(InvalidStateTransition):
            initiate_consent(creator, representative)

    def test_already_started(self, gathering, creator, representative):
        with pytest.raises(AlreadyInProgress) as exc_info:
            initiate_consent(creator, representative)
        assert exc_info.value.code == 'CONSENT_ALREADY_INITIATED'

    def test_no_eligible_voters(self, creator, representative):
        report_death(creator, representative)
        with mock.patch(
            'apps.lifecycle.services.opening.get_consent_eligible_members',
            return_value=EligibleMembers(),
        ):
            with pytest.raises(NoEligibleVoters):
                initiate_consent(creator, representative)

        assert Lifecycle.objects.get(creator=creator).status == Lifecycle.STATUS_DEATH_REPORTED

    def test_member_fallback_without_representative(self, creator, member):
        report_death(creator, member)
        lifecycle = initiate_consent(creator, member)
        assert lifecycle.status == Lifecycle.STATUS_CONSENT_GATHERING

    def test_member_forbidden_with_representative(self, creator, representative, member):
        report_death(creator, member)
        with pytest.raises(Forbidden):
            initiate_consent(creator, member)

    def test_members_added_later_are_not_enfranchised(self, gathering, creator, make_user, add_member):
        latecomer = make_user()
        add_member(creator, latecomer)

        with pytest.raises(NotFound) as exc_info:
            submit_consent(creator, latecomer, True)
        assert exc_info.value.code == 'CONSENT_RECORD_NOT_FOUND'

    def test_vote_without_membership(self, gathering):
        with pytest.raises(NotFound) as exc_info:
            cast_vote(ConsentRecord, gathering, None, True, timezone.now())
        assert exc_info.value.code == 'MEMBER_NOT_FOUND'


@pytest.mark.django_db
class TestSubmitConsent:

    def test_records_vote(self, gathering, creator, member):
        result = submit_consent(creator, member, True)

        assert result.opened is False
        assert result.record.decision == ConsentDecision.AGREED
        assert result.record.consented is True
        assert result.record.decided_at is not None

    def test_unanimous_opens(self, gathering, creator, representative, member):
        submit_consent(creator, member, True)
        result = submit_consent(creator, representative, True)

        assert result.opened is True
        lifecycle = Lifecycle.objects.get(creator=creator)
        assert lifecycle.status == Lifecycle.STATUS_OPENED
        assert lifecycle.opened_at is not None
        assert LifecycleActionLog.objects.filter(creator=creator, action=audit.NOTE_OPENED).count() == 1
        assert Notification.objects.filter(notification_type='note_opened').count() == 2

    def test_decline_does_not_reset(self, gathering, creator, representative, member):
        submit_consent(creator, member, False)
        result = submit_consent(creator, representative, True)

        assert result.opened is False
        lifecycle = Lifecycle.objects.get(creator=creator)
        assert lifecycle.status == Lifecycle.STATUS_CONSENT_GATHERING
        assert ConsentRecord.objects.filter(lifecycle=lifecycle).count() == 2

    def test_changing_a_decline_to_agree_can_open(self, gathering, creator, representative, member):
        submit_consent(creator, member, False)
        submit_consent(creator, representative, True)
        result = submit_consent(creator, member, True)

        assert result.opened is True

    def test_requires_gathering(self, creator, representative, member):
        report_death(creator, representative)
        with pytest.raises(InvalidStateTransition):
            submit_consent(creator, member, True)

    def test_rejects_non_boolean(self, gathering, creator, member):
        with pytest.raises(InvalidRequest):
            submit_consent(creator, member, 'yes')
        with pytest.raises(InvalidRequest):
            submit_consent(creator, member, None)

    def test_stranger_forbidden(self, gathering, creator, stranger):
        with pytest.raises(Forbidden):
            submit_consent(creator, stranger, True)


@pytest.mark.django_db
class TestExactlyOnceOpening:

    def test_guarded_update_succeeds_once(self, gathering, creator):
        ConsentRecord.objects.filter(lifecycle=gathering).update(decision=ConsentDecision.AGREED)

        first = Lifecycle.objects.get(pk=gathering.pk)
        second = Lifecycle.objects.get(pk=gathering.pk)

        assert open_if_unanimous(first) is True
        assert open_if_unanimous(second) is False
        assert Lifecycle.objects.get(pk=gathering.pk).status == Lifecycle.STATUS_OPENED

    def test_concurrent_final_votes_open_once(self, gathering, creator, representative, member):
        submit_consent(creator, member, True)
        stale = Lifecycle.objects.get(pk=gathering.pk)
        submit_consent(creator, representative, True)

        # A voter that read the lifecycle before the opening committed.
        with mock.patch('apps.lifecycle.services.opening.lock_lifecycle', return_value=stale):
            late = submit_consent(creator, member, True)

        assert late.opened is False
        assert Lifecycle.objects.get(pk=gathering.pk).status == Lifecycle.STATUS_OPENED
        assert LifecycleActionLog.objects.filter(creator=creator, action=audit.NOTE_OPENED).count() == 1
        assert Notification.objects.filter(notification_type='note_opened').count() == 2

    def test_not_unanimous_does_nothing(self, gathering):
        assert open_if_unanimous(gathering) is False
        gathering.refresh_from_db()
        assert gathering.status == Lifecycle.STATUS_CONSENT_GATHERING

    def test_vote_after_opening_is_rejected(self, gathering, creator, representative, member):
        submit_consent(creator, member, True)
        submit_consent(creator, representative, True)

        with pytest.raises(InvalidStateTransition):
            submit_consent(creator, member, True)
        assert LifecycleActionLog.objects.filter(creator=creator, action=audit.NOTE_OPENED).count() == 1


@pytest.mark.django_db
class TestResetConsent:

    def test_resets_to_death_reported(self, gathering, creator, representative, member):
        submit_consent(creator, member, False)
        lifecycle = reset_consent(creator, representative)

        assert lifecycle.status == Lifecycle.STATUS_DEATH_REPORTED
        assert lifecycle.consent_initiated_by is None
        assert not ConsentRecord.objects.filter(lifecycle=lifecycle).exists()

    def test_vote_can_start_again(self, gathering, creator, representative):
        reset_consent(creator, representative)
        lifecycle = initiate_consent(creator, representative)
        assert ConsentRecord.objects.filter(lifecycle=lifecycle).count() == 2

    def test_nothing_to_reset(self, creator, representative):
        report_death(creator, representative)
        with pytest.raises(InvalidStateTransition):
            reset_consent(creator, representative)

    def test_member_forbidden_with_representative(self, gathering, creator, member):
        with pytest.raises(Forbidden):
            reset_consent(creator, member)


@pytest.mark.django_db
class TestConsentStatus:

    def test_representative_sees_all(self, gathering, creator, representative, member):
        submit_consent(creator, member, True)
        status = get_consent_status(creator, representative)

        assert status['status'] == Lifecycle.STATUS_CONSENT_GATHERING
        assert status['can_view_all'] is True
        assert len(status['records']) == 2
        assert status['total_count'] == 2
        assert status['consented_count'] == 1
        assert status['pending_count'] == 1
        assert status['my_consent'].family_member.member == representative

    def test_member_sees_only_own(self, gathering, creator, member):
        status = get_consent_status(creator, member)

        assert status['can_view_all'] is False
        assert [r.family_member.member for r in status['records']] == [member]
        assert status['total_count'] == 2

    def test_member_sees_all_without_representative(self, creator, member, make_user, add_member):
        other = make_user()
        add_member(creator, other)
        report_death(creator, member)
        initiate_consent(creator, member)

        status = get_consent_status(creator, member)
        assert status['can_view_all'] is True
        assert len(status['records']) == 2

    def test_stranger_forbidden(self, gathering, creator, stranger):
        with pytest.raises(Forbidden):
            get_consent_status(creator, stranger)


@pytest.mark.django_db
class TestOpeningSideEffectFailures:

    def test_audit_failure_still_opens(self, gathering, creator, representative, member):
        submit_consent(creator, member, True)

        with mock.patch.object(LifecycleActionLog.objects, 'create', side_effect=DatabaseError('disk full')):
            result = submit_consent(creator, representative, True)

        assert result.opened is True
        assert Lifecycle.objects.get(creator=creator).status == Lifecycle.STATUS_OPENED
        assert not LifecycleActionLog.objects.filter(creator=creator, action=audit.NOTE_OPENED).exists()

    def test_notification_failure_still_opens(self, gathering, creator, representative, member):
        submit_consent(creator, member, True)

        with mock.patch('apps.lifecycle.services.audit.notify_users', side_effect=RuntimeError('mail down')):
            result = submit_consent(creator, representative, True)

        assert result.opened is True
        assert Lifecycle.objects.get(creator=creator).status == Lifecycle.STATUS_OPENED
        assert LifecycleActionLog.objects.filter(creator=creator, action=audit.NOTE_OPENED).count() == 1
        assert not Notification.objects.filter(notification_type='note_opened').exists()
