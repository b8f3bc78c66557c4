"""
Notification serializers for the Keepsake API.
"""
from rest_framework import serializers

from apps.accounts.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """In-app notification."""

    class Meta:
        model = Notification
        fields = [
            'id', 'notification_type', 'title', 'message',
            'related_creator', 'is_read', 'created_at'
        ]
        read_only_fields = fields
