"""
Authentication URL patterns for the Keepsake API.
"""
from django.urls import path

from .views import (
    LoginView,
    LogoutView,
    TokenRefreshAPIView,
    CurrentUserView,
)

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('token/refresh/', TokenRefreshAPIView.as_view(), name='token_refresh'),
    path('me/', CurrentUserView.as_view(), name='current_user'),
]
