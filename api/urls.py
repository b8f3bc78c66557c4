"""
Keepsake API routes.

Each API version ships with its own OpenAPI schema and browsable docs,
so clients of a pinned version never see another version's contract.
"""
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

app_name = 'api'

urlpatterns = [
    path('v1/', include('api.v1.urls', namespace='v1')),
    path('v1/schema/', SpectacularAPIView.as_view(api_version='v1'), name='v1-schema'),
    path('v1/docs/', SpectacularSwaggerView.as_view(url_name='api:v1-schema'), name='v1-docs'),
    path('v1/redoc/', SpectacularRedocView.as_view(url_name='api:v1-schema'), name='v1-redoc'),
]
