"""
Lifecycle serializers for the Keepsake API.
"""
from rest_framework import serializers

from apps.lifecycle.models import LifecycleActionLog
from apps.lifecycle.services.audit import get_creator_name


class LifecycleSerializer(serializers.Serializer):
    """Snapshot of a creator's lifecycle. Built by lifecycle_snapshot()."""
    creator_id = serializers.IntegerField()
    status = serializers.CharField()
    deletion_status = serializers.CharField(allow_null=True)
    death_reported_at = serializers.DateTimeField(allow_null=True)
    death_reported_by = serializers.IntegerField(allow_null=True)
    consent_initiated_by = serializers.IntegerField(allow_null=True)
    opened_at = serializers.DateTimeField(allow_null=True)
    has_representative = serializers.BooleanField()


def lifecycle_snapshot(creator, lifecycle, has_representative):
    """Flatten a lifecycle (or its absence) for LifecycleSerializer."""
    if lifecycle is None:
        return {
            'creator_id': creator.pk,
            'status': 'active',
            'deletion_status': None,
            'death_reported_at': None,
            'death_reported_by': None,
            'consent_initiated_by': None,
            'opened_at': None,
            'has_representative': has_representative,
        }
    return {
        'creator_id': creator.pk,
        'status': lifecycle.status,
        'deletion_status': lifecycle.deletion_status,
        'death_reported_at': lifecycle.death_reported_at,
        'death_reported_by': lifecycle.death_reported_by_id,
        'consent_initiated_by': lifecycle.consent_initiated_by_id,
        'opened_at': lifecycle.opened_at,
        'has_representative': has_representative,
    }


class VoteSerializer(serializers.Serializer):
    """One family member's opening or deletion vote."""
    id = serializers.IntegerField(read_only=True)
    member_id = serializers.IntegerField(source='family_member.member_id', read_only=True)
    member_name = serializers.SerializerMethodField()
    role = serializers.CharField(source='family_member.role', read_only=True)
    relationship_label = serializers.CharField(source='family_member.relationship_label', read_only=True)
    decision = serializers.CharField(read_only=True)
    consented = serializers.BooleanField(read_only=True, allow_null=True)
    consented_at = serializers.DateTimeField(source='decided_at', read_only=True)
    auto_resolved = serializers.BooleanField(read_only=True)

    def get_member_name(self, obj):
        member = obj.family_member.member
        return member.get_full_name() or member.email


class ConsentSubmitSerializer(serializers.Serializer):
    """Request body for casting a vote."""
    consented = serializers.BooleanField()


class ConsentStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    can_view_all = serializers.BooleanField()
    records = VoteSerializer(many=True)
    my_consent = VoteSerializer(allow_null=True)
    total_count = serializers.IntegerField()
    consented_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()


class DeletionConsentStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    deletion_status = serializers.CharField(allow_null=True)
    records = VoteSerializer(many=True, allow_null=True)
    my_consent = VoteSerializer(allow_null=True)
    total_count = serializers.IntegerField()
    consented_count = serializers.IntegerField()
    all_consented = serializers.BooleanField()


class ActionLogSerializer(serializers.ModelSerializer):
    """Lifecycle action log entry."""
    performed_by_email = serializers.SerializerMethodField()

    class Meta:
        model = LifecycleActionLog
        fields = ['id', 'action', 'performed_by', 'performed_by_email', 'metadata', 'created_at']
        read_only_fields = fields

    def get_performed_by_email(self, obj):
        return obj.performed_by.email if obj.performed_by else None


class ConnectionSerializer(serializers.Serializer):
    """A creator the current user belongs to as family."""
    creator_id = serializers.IntegerField(source='creator.id')
    creator_name = serializers.SerializerMethodField()
    creator_email = serializers.EmailField(source='creator.email')
    role = serializers.CharField()
    relationship_label = serializers.CharField()
    status = serializers.CharField()
    deletion_status = serializers.CharField(allow_null=True)
    has_pending_consent = serializers.BooleanField()
    has_pending_deletion_consent = serializers.BooleanField()

    def get_creator_name(self, obj):
        return get_creator_name(obj['creator'])
