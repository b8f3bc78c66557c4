"""
Records URL patterns for the Keepsake API.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ConversationViewSet, LockStatusView

router = DefaultRouter()
router.register('conversations', ConversationViewSet, basename='conversation')

urlpatterns = [
    path('lock-status/', LockStatusView.as_view(), name='records_lock_status'),
    path('', include(router.urls)),
]
