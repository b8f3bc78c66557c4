"""
Lifecycle URL patterns for the Keepsake API.
"""
from django.urls import path

from .views import (
    LifecycleDetailView, ReportDeathView, CancelDeathReportView,
    InitiateConsentView, SubmitConsentView, ConsentStatusView, ResetConsentView,
    InitiateDataDeletionView, SubmitDeletionConsentView,
    CancelDataDeletionView, DeletionConsentStatusView,
    ActionHistoryView, MyConnectionsView,
)

urlpatterns = [
    path('connections/', MyConnectionsView.as_view(), name='lifecycle_connections'),

    # Lifecycle and death report
    path('<int:creator_id>/', LifecycleDetailView.as_view(), name='lifecycle_detail'),
    path('<int:creator_id>/report-death/', ReportDeathView.as_view(), name='lifecycle_report_death'),
    path('<int:creator_id>/cancel-death-report/', CancelDeathReportView.as_view(), name='lifecycle_cancel_death_report'),

    # Opening consent
    path('<int:creator_id>/initiate-consent/', InitiateConsentView.as_view(), name='lifecycle_initiate_consent'),
    path('<int:creator_id>/consent/', SubmitConsentView.as_view(), name='lifecycle_consent'),
    path('<int:creator_id>/consent-status/', ConsentStatusView.as_view(), name='lifecycle_consent_status'),
    path('<int:creator_id>/reset-consent/', ResetConsentView.as_view(), name='lifecycle_reset_consent'),

    # Deletion consent
    path('<int:creator_id>/initiate-data-deletion/', InitiateDataDeletionView.as_view(), name='lifecycle_initiate_data_deletion'),
    path('<int:creator_id>/deletion-consent/', SubmitDeletionConsentView.as_view(), name='lifecycle_deletion_consent'),
    path('<int:creator_id>/cancel-data-deletion/', CancelDataDeletionView.as_view(), name='lifecycle_cancel_data_deletion'),
    path('<int:creator_id>/deletion-consent-status/', DeletionConsentStatusView.as_view(), name='lifecycle_deletion_consent_status'),

    # Audit trail
    path('<int:creator_id>/history/', ActionHistoryView.as_view(), name='lifecycle_history'),
]
