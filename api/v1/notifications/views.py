"""
Notification views for the Keepsake API.
"""
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from apps.accounts.services import get_unread_notifications, mark_notification_read, mark_all_read
from api.pagination import StandardResultsPagination

from .serializers import NotificationSerializer


class NotificationListView(generics.ListAPIView):
    """
    List unread notifications for the current user.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    pagination_class = StandardResultsPagination

    @extend_schema(summary="List unread notifications")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return get_unread_notifications(self.request.user)


class MarkNotificationReadView(APIView):
    """
    Mark one notification as read.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Mark notification read", request=None)
    def post(self, request, pk):
        if not mark_notification_read(request.user, pk):
            return Response(
                {'error': 'Notification not found.', 'code': 'NOT_FOUND'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response({'message': 'Notification marked as read.'})


class MarkAllNotificationsReadView(APIView):
    """
    Mark all notifications as read.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Mark all notifications read", request=None)
    def post(self, request):
        count = mark_all_read(request.user)
        return Response({'message': f'{count} notification(s) marked as read.', 'count': count})
