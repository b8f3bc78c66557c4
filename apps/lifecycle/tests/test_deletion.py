from unittest import mock

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import InMemoryStorage, default_storage

from apps.lifecycle.models import (
    Lifecycle, ConsentDecision, ConsentRecord, DeletionConsentRecord, LifecycleActionLog,
)
from apps.lifecycle.services import audit
from apps.lifecycle.services.deletion import (
    initiate_data_deletion, submit_deletion_consent, cancel_data_deletion, get_deletion_consent_status,
)
from apps.lifecycle.services.errors import AlreadyInProgress, Forbidden, InvalidStateTransition
from apps.lifecycle.services.opening import initiate_consent, submit_consent
from apps.lifecycle.services.transitions import report_death
from apps.accounts.models import Notification
from apps.records.models import Conversation


@pytest.fixture
def opened(creator, representative, member):
    report_death(creator, representative)
    initiate_consent(creator, representative)
    submit_consent(creator, representative, True)
    submit_consent(creator, member, True)
    return Lifecycle.objects.get(creator=creator)


@pytest.fixture
def deletion_gathering(opened, creator, representative):
    return initiate_data_deletion(creator, representative)


@pytest.mark.django_db
class TestInitiateDataDeletion:

    def test_starts_vote(self, opened, creator, representative):
        lifecycle = initiate_data_deletion(creator, representative)

        assert lifecycle.status == Lifecycle.STATUS_OPENED
        assert lifecycle.deletion_status == Lifecycle.DELETION_CONSENT_GATHERING
        assert DeletionConsentRecord.objects.filter(lifecycle=lifecycle, decision=ConsentDecision.PENDING).count() == 2

    def test_requires_opened(self, creator, representative):
        report_death(creator, representative)
        with pytest.raises(InvalidStateTransition):
            initiate_data_deletion(creator, representative)

    def test_already_started(self, deletion_gathering, creator, representative):
        with pytest.raises(AlreadyInProgress) as exc_info:
            initiate_data_deletion(creator, representative)
        assert exc_info.value.code == 'ALREADY_IN_PROGRESS'

    def test_member_forbidden(self, opened, creator, member):
        with pytest.raises(Forbidden):
            initiate_data_deletion(creator, member)

    def test_no_fallback_for_members(self, creator, member, make_user, add_member):
        other = make_user()
        add_member(creator, other)
        report_death(creator, member)
        initiate_consent(creator, member)
        submit_consent(creator, member, True)
        submit_consent(creator, other, True)

        with pytest.raises(Forbidden):
            initiate_data_deletion(creator, member)


@pytest.mark.django_db
class TestDeletionDecline:

    def test_decline_resets_in_one_step(self, deletion_gathering, creator, representative, member):
        submit_deletion_consent(creator, representative, True)
        result = submit_deletion_consent(creator, member, False)

        assert result.declined is True
        lifecycle = Lifecycle.objects.get(creator=creator)
        assert lifecycle.status == Lifecycle.STATUS_OPENED
        assert lifecycle.deletion_status is None
        assert not DeletionConsentRecord.objects.filter(lifecycle=lifecycle).exists()

        status = get_deletion_consent_status(creator, representative)
        assert status['deletion_status'] is None
        assert status['total_count'] == 0

    def test_decline_is_logged_and_notified(self, deletion_gathering, creator, member):
        submit_deletion_consent(creator, member, False)

        assert LifecycleActionLog.objects.filter(
            creator=creator, action=audit.DELETION_CONSENT_DECLINED
        ).count() == 1
        assert Notification.objects.filter(notification_type='deletion_consent_declined').count() == 2

    def test_opening_votes_survive_decline(self, deletion_gathering, creator, member):
        submit_deletion_consent(creator, member, False)
        assert ConsentRecord.objects.filter(lifecycle__creator=creator).count() == 2


@pytest.mark.django_db
class TestDeletionUnanimity:

    def test_erases_creator_data(self, deletion_gathering, creator, representative, member):
        conversation = Conversation.objects.create(
            user=creator,
            title='Summer',
            audio=ContentFile(b'audio-bytes', name='summer.mp3'),
        )
        audio_name = conversation.audio.name
        assert default_storage.exists(audio_name)

        submit_deletion_consent(creator, representative, True)
        result = submit_deletion_consent(creator, member, True)

        assert result.erased is True
        assert not Lifecycle.objects.filter(creator=creator).exists()
        assert not Conversation.objects.filter(user=creator).exists()
        assert not ConsentRecord.objects.exists()
        assert not DeletionConsentRecord.objects.exists()
        assert not default_storage.exists(audio_name)

    def test_history_and_notifications_survive(self, deletion_gathering, creator, representative, member):
        submit_deletion_consent(creator, representative, True)
        submit_deletion_consent(creator, member, True)

        entry = LifecycleActionLog.objects.get(creator=creator, action=audit.DATA_DELETION_EXECUTED)
        assert entry.lifecycle is None
        assert LifecycleActionLog.objects.filter(creator=creator, action=audit.DEATH_REPORTED).exists()
        recipients = set(
            Notification.objects.filter(notification_type='data_deleted').values_list('recipient_id', flat=True)
        )
        assert recipients == {representative.id, member.id}

    def test_storage_failure_does_not_block_erasure(self, deletion_gathering, creator, representative, member):
        Conversation.objects.create(user=creator, audio=ContentFile(b'x', name='a.mp3'))

        with mock.patch.object(InMemoryStorage, 'delete', side_effect=OSError('bucket unavailable')):
            submit_deletion_consent(creator, representative, True)
            submit_deletion_consent(creator, member, True)

        assert not Conversation.objects.filter(user=creator).exists()

    def test_partial_agreement_keeps_data(self, deletion_gathering, creator, representative):
        Conversation.objects.create(user=creator, title='Keep me')
        result = submit_deletion_consent(creator, representative, True)

        assert result.erased is False
        assert Conversation.objects.filter(user=creator).exists()


@pytest.mark.django_db
class TestCancelDataDeletion:

    def test_cancels(self, deletion_gathering, creator, representative):
        lifecycle = cancel_data_deletion(creator, representative)

        assert lifecycle.deletion_status is None
        assert not DeletionConsentRecord.objects.filter(lifecycle=lifecycle).exists()

    def test_nothing_to_cancel(self, opened, creator, representative):
        with pytest.raises(InvalidStateTransition):
            cancel_data_deletion(creator, representative)

    def test_member_forbidden(self, deletion_gathering, creator, member):
        with pytest.raises(Forbidden):
            cancel_data_deletion(creator, member)


@pytest.mark.django_db
class TestDeletionConsentStatus:

    def test_representative_sees_list(self, deletion_gathering, creator, representative, member):
        submit_deletion_consent(creator, member, True)
        status = get_deletion_consent_status(creator, representative)

        assert len(status['records']) == 2
        assert status['consented_count'] == 1
        assert status['all_consented'] is False
        assert status['my_consent'].is_pending

    def test_member_sees_only_tallies(self, deletion_gathering, creator, member):
        submit_deletion_consent(creator, member, True)
        status = get_deletion_consent_status(creator, member)

        assert status['records'] is None
        assert status['total_count'] == 2
        assert status['my_consent'].consented is True
