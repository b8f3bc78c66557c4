"""
Notification URL patterns for the Keepsake API.
"""
from django.urls import path

from .views import NotificationListView, MarkNotificationReadView, MarkAllNotificationsReadView

urlpatterns = [
    path('', NotificationListView.as_view(), name='notification_list'),
    path('<int:pk>/read/', MarkNotificationReadView.as_view(), name='notification_read'),
    path('read-all/', MarkAllNotificationsReadView.as_view(), name='notification_read_all'),
]
