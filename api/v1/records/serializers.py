"""
Records serializers for the Keepsake API.
"""
from django.conf import settings
from rest_framework import serializers

from apps.records.models import Conversation


class ConversationSerializer(serializers.ModelSerializer):
    """Conversation in the current user's record."""
    has_audio = serializers.BooleanField(read_only=True)

    class Meta:
        model = Conversation
        fields = ['id', 'title', 'transcript', 'audio', 'has_audio', 'created_at', 'updated_at']
        read_only_fields = ['id', 'has_audio', 'created_at', 'updated_at']
        extra_kwargs = {'audio': {'required': False}}

    def validate_audio(self, value):
        if not value:
            return value
        content_type = getattr(value, 'content_type', None)
        if content_type not in settings.ALLOWED_AUDIO_TYPES:
            raise serializers.ValidationError(f'Unsupported audio type: {content_type}')
        if value.size > settings.MAX_UPLOAD_SIZE:
            max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
            raise serializers.ValidationError(f'Audio file is too large (max {max_mb}MB).')
        return value


class LockStatusSerializer(serializers.Serializer):
    blocked = serializers.BooleanField()
    lifecycle_status = serializers.CharField()
