from unittest import mock

import pytest
from django.core.management import call_command

from apps.accounts.models import FamilyMember
from apps.lifecycle.models import (
    Lifecycle, ConsentDecision, ConsentRecord, DeletionConsentRecord, LifecycleActionLog,
)
from apps.lifecycle.services import audit
from apps.lifecycle.services.deceased import (
    sweep_deceased_member, revert_auto_resolved_consent, find_owed_votes, FLOW_OPENING,
)
from apps.lifecycle.services.deletion import initiate_data_deletion, submit_deletion_consent
from apps.lifecycle.services.opening import initiate_consent, submit_consent
from apps.lifecycle.services.transitions import report_death, cancel_death_report
from apps.lifecycle.services.votes import auto_resolve as real_auto_resolve
from apps.records.models import Conversation


@pytest.fixture
def relative(make_user, add_member, member):
    """Someone in the member's own family, able to report the member's death."""
    user = make_user('relative@example.com')
    add_member(member, user)
    return user


def vote_of(record_model, user, creator):
    return record_model.objects.get(family_member__member=user, lifecycle__creator=creator)


@pytest.mark.django_db
class TestDeceasedVoterClosure:

    def test_pending_vote_is_auto_resolved(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)

        report_death(member, relative)

        record = vote_of(ConsentRecord, member, creator)
        assert record.decision == ConsentDecision.AGREED
        assert record.consented is True
        assert record.auto_resolved is True
        assert LifecycleActionLog.objects.filter(
            creator=creator, action=audit.CONSENT_AUTO_RESOLVED
        ).count() == 1
        assert Lifecycle.objects.get(creator=creator).status == Lifecycle.STATUS_CONSENT_GATHERING

    def test_auto_resolution_completes_unanimity(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        submit_consent(creator, representative, True)

        report_death(member, relative)

        lifecycle = Lifecycle.objects.get(creator=creator)
        assert lifecycle.status == Lifecycle.STATUS_OPENED
        assert LifecycleActionLog.objects.filter(creator=creator, action=audit.NOTE_OPENED).count() == 1

    def test_declined_vote_is_left_alone(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        submit_consent(creator, member, False)

        report_death(member, relative)

        record = vote_of(ConsentRecord, member, creator)
        assert record.decision == ConsentDecision.DECLINED
        assert record.auto_resolved is False

    def test_deletion_vote_is_auto_resolved_and_erases(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        submit_consent(creator, representative, True)
        submit_consent(creator, member, True)
        initiate_data_deletion(creator, representative)
        submit_deletion_consent(creator, representative, True)
        Conversation.objects.create(user=creator, title='Last words')

        report_death(member, relative)

        assert not Lifecycle.objects.filter(creator=creator).exists()
        assert not Conversation.objects.filter(user=creator).exists()
        assert LifecycleActionLog.objects.filter(
            creator=creator, action=audit.DELETION_CONSENT_AUTO_RESOLVED
        ).exists()
        assert LifecycleActionLog.objects.filter(
            creator=creator, action=audit.DATA_DELETION_EXECUTED
        ).exists()

    def test_one_failing_creator_does_not_stop_the_sweep(self, creator, representative, member, make_user, add_member):
        other_creator = make_user('other@example.com')
        other_rep = make_user()
        add_member(other_creator, other_rep, role=FamilyMember.ROLE_REPRESENTATIVE)
        add_member(other_creator, member)

        for c, rep in ((creator, representative), (other_creator, other_rep)):
            report_death(c, rep)
            initiate_consent(c, rep)

        def flaky(record_model, lifecycle, membership, now):
            if lifecycle.creator_id == creator.pk:
                raise RuntimeError('database hiccup')
            return real_auto_resolve(record_model, lifecycle, membership, now)

        with mock.patch('apps.lifecycle.services.deceased.auto_resolve', side_effect=flaky):
            outcomes = sweep_deceased_member(member)

        by_creator = {o.creator_id: o for o in outcomes}
        assert by_creator[creator.pk].error == 'database hiccup'
        assert by_creator[other_creator.pk].resolved is True
        assert vote_of(ConsentRecord, member, creator).is_pending
        assert vote_of(ConsentRecord, member, other_creator).auto_resolved is True

    def test_sweep_ignores_idle_families(self, creator, representative, member):
        assert sweep_deceased_member(member) == []


@pytest.mark.django_db
class TestRevertAutoResolvedConsent:

    def test_cancelled_report_reverts_vote(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        report_death(member, relative)

        cancel_death_report(member, relative)

        record = vote_of(ConsentRecord, member, creator)
        assert record.is_pending
        assert record.consented is None
        assert record.auto_resolved is False
        assert record.decided_at is None
        assert LifecycleActionLog.objects.filter(
            creator=creator, action=audit.CONSENT_AUTO_RESOLVE_REVERTED
        ).count() == 1

    def test_opened_note_stays_opened(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        submit_consent(creator, representative, True)
        report_death(member, relative)
        assert Lifecycle.objects.get(creator=creator).status == Lifecycle.STATUS_OPENED

        cancel_death_report(member, relative)

        assert Lifecycle.objects.get(creator=creator).status == Lifecycle.STATUS_OPENED
        assert vote_of(ConsentRecord, member, creator).is_pending

    def test_reverts_deletion_votes(self, creator, representative, member, relative, make_user, add_member):
        third = make_user()
        add_member(creator, third)
        report_death(creator, representative)
        initiate_consent(creator, representative)
        for voter in (representative, member, third):
            submit_consent(creator, voter, True)
        initiate_data_deletion(creator, representative)

        report_death(member, relative)
        assert vote_of(DeletionConsentRecord, member, creator).auto_resolved is True

        assert revert_auto_resolved_consent(member) == 1
        assert vote_of(DeletionConsentRecord, member, creator).is_pending

    def test_own_votes_are_untouched(self, creator, representative, member):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        submit_consent(creator, member, True)

        assert revert_auto_resolved_consent(member) == 0
        assert vote_of(ConsentRecord, member, creator).consented is True


@pytest.mark.django_db
class TestDeceasedSnapshot:

    def test_deceased_member_is_agreed_at_vote_start(self, creator, representative, member, relative):
        report_death(member, relative)
        report_death(creator, representative)
        initiate_consent(creator, representative)

        record = vote_of(ConsentRecord, member, creator)
        assert record.consented is True
        assert record.auto_resolved is True
        assert vote_of(ConsentRecord, representative, creator).is_pending

        result = submit_consent(creator, representative, True)
        assert result.opened is True


@pytest.mark.django_db
class TestSweepCommand:

    def test_find_owed_votes(self, creator, representative, member):
        report_death(creator, representative)
        initiate_consent(creator, representative)

        assert find_owed_votes(member) == [(creator, FLOW_OPENING)]

    def test_dry_run_changes_nothing(self, creator, representative, member, relative):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        Lifecycle.objects.create(creator=member, status=Lifecycle.STATUS_DEATH_REPORTED)

        call_command('sweep_deceased_members', '--dry-run')

        assert vote_of(ConsentRecord, member, creator).is_pending

    def test_recovers_missed_sweep(self, creator, representative, member):
        report_death(creator, representative)
        initiate_consent(creator, representative)
        Lifecycle.objects.create(creator=member, status=Lifecycle.STATUS_DEATH_REPORTED)

        call_command('sweep_deceased_members', '--user', member.email)

        assert vote_of(ConsentRecord, member, creator).auto_resolved is True
