"""
Lifecycle views for the Keepsake API.

Every view acts on behalf of request.user. Lifecycle errors are answered
as {"error": ..., "code": ...} with the error's HTTP status.
"""
from django.contrib.auth.models import User
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiExample

from apps.lifecycle import services
from apps.lifecycle.services import LifecycleError
from api.pagination import StandardResultsPagination

from .serializers import (
    LifecycleSerializer, lifecycle_snapshot, VoteSerializer,
    ConsentSubmitSerializer, ConsentStatusSerializer,
    DeletionConsentStatusSerializer, ActionLogSerializer, ConnectionSerializer,
)


class LifecycleErrorMixin:
    """Translate LifecycleError into the API's error body."""

    def handle_exception(self, exc):
        if isinstance(exc, LifecycleError):
            return Response({'error': exc.message, 'code': exc.code}, status=exc.http_status)
        return super().handle_exception(exc)


class CreatorLifecycleView(LifecycleErrorMixin, APIView):
    """Base view for endpoints under /lifecycle/<creator_id>/."""
    permission_classes = [IsAuthenticated]

    def get_creator(self):
        creator = User.objects.filter(pk=self.kwargs['creator_id']).first()
        if creator is None:
            raise services.NotFound('Creator not found.')
        return creator

    def get_consented(self):
        """The raw 'consented' value; None when the body is not a JSON object."""
        if not hasattr(self.request.data, 'get'):
            return None
        return self.request.data.get('consented')

    def snapshot(self, creator, lifecycle):
        data = lifecycle_snapshot(creator, lifecycle, services.has_active_representative(creator))
        return LifecycleSerializer(data).data


class LifecycleDetailView(CreatorLifecycleView):
    """
    Current lifecycle of a creator.
    """

    @extend_schema(
        summary="Get lifecycle",
        description="Current status, timestamps and whether a representative exists. "
                    "Available to the creator and any active family member.",
        responses=LifecycleSerializer
    )
    def get(self, request, creator_id):
        creator = self.get_creator()
        state = services.get_lifecycle_state(creator, request.user)
        data = lifecycle_snapshot(creator, state.lifecycle, state.has_representative)
        return Response(LifecycleSerializer(data).data)


class ReportDeathView(CreatorLifecycleView):
    """
    Report the creator's death.
    """

    @extend_schema(
        summary="Report death",
        description="Any active family member may report. Repeating the report "
                    "returns the existing record with already_reported = true.",
        request=None
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        result = services.report_death(creator, request.user)
        return Response({
            'lifecycle': self.snapshot(creator, result.lifecycle),
            'already_reported': result.already_reported,
        })


class CancelDeathReportView(CreatorLifecycleView):
    """
    Withdraw a death report.
    """

    @extend_schema(
        summary="Cancel death report",
        description="Representative only; any member may act when no representative exists.",
        request=None,
        responses=LifecycleSerializer
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        lifecycle = services.cancel_death_report(creator, request.user)
        return Response(self.snapshot(creator, lifecycle))


class InitiateConsentView(CreatorLifecycleView):
    """
    Start the opening vote.
    """

    @extend_schema(
        summary="Initiate consent gathering",
        description="Representative only; any member may act when no representative exists. "
                    "Requires a reported death and at least one active family member.",
        request=None,
        responses=LifecycleSerializer
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        lifecycle = services.initiate_consent(creator, request.user)
        return Response(self.snapshot(creator, lifecycle))


class SubmitConsentView(CreatorLifecycleView):
    """
    Cast the current user's opening vote.
    """

    @extend_schema(
        summary="Submit consent",
        description="Any active family member who was enfranchised when the vote started.",
        request=ConsentSubmitSerializer,
        examples=[
            OpenApiExample(
                'Agree',
                value={'consented': True},
                request_only=True
            )
        ]
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        result = services.submit_consent(creator, request.user, self.get_consented())
        lifecycle = services.get_lifecycle(creator)
        return Response({
            'consent': VoteSerializer(result.record).data,
            'opened': result.opened,
            'lifecycle': self.snapshot(creator, lifecycle),
        })


class ConsentStatusView(CreatorLifecycleView):
    """
    Opening vote status.
    """

    @extend_schema(
        summary="Get consent status",
        description="Representatives (or members, when no representative exists) see every "
                    "vote; other members see only their own.",
        responses=ConsentStatusSerializer
    )
    def get(self, request, creator_id):
        creator = self.get_creator()
        status = services.get_consent_status(creator, request.user)
        return Response(ConsentStatusSerializer(status).data)


class ResetConsentView(CreatorLifecycleView):
    """
    Abandon the opening vote.
    """

    @extend_schema(
        summary="Reset consent gathering",
        description="Deletes every opening vote and returns to death_reported. "
                    "Representative only; any member may act when no representative exists.",
        request=None,
        responses=LifecycleSerializer
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        lifecycle = services.reset_consent(creator, request.user)
        return Response(self.snapshot(creator, lifecycle))


class InitiateDataDeletionView(CreatorLifecycleView):
    """
    Start the deletion vote.
    """

    @extend_schema(
        summary="Initiate data deletion",
        description="Representative only. Requires an opened note.",
        request=None
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        lifecycle = services.initiate_data_deletion(creator, request.user)
        return Response({
            'erased': lifecycle is None,
            'lifecycle': self.snapshot(creator, lifecycle),
        })


class SubmitDeletionConsentView(CreatorLifecycleView):
    """
    Cast the current user's deletion vote.
    """

    @extend_schema(
        summary="Submit deletion consent",
        description="A single decline stops the deletion. The final agreeing vote "
                    "permanently deletes the creator's data.",
        request=ConsentSubmitSerializer
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        result = services.submit_deletion_consent(creator, request.user, self.get_consented())
        lifecycle = services.get_lifecycle(creator)
        return Response({
            'consent': VoteSerializer(result.record).data if result.record else None,
            'declined': result.declined,
            'erased': result.erased,
            'lifecycle': self.snapshot(creator, lifecycle),
        })


class CancelDataDeletionView(CreatorLifecycleView):
    """
    Abandon the deletion vote.
    """

    @extend_schema(
        summary="Cancel data deletion",
        description="Representative only.",
        request=None,
        responses=LifecycleSerializer
    )
    def post(self, request, creator_id):
        creator = self.get_creator()
        lifecycle = services.cancel_data_deletion(creator, request.user)
        return Response(self.snapshot(creator, lifecycle))


class DeletionConsentStatusView(CreatorLifecycleView):
    """
    Deletion vote status.
    """

    @extend_schema(
        summary="Get deletion consent status",
        description="Tallies and the caller's own vote; representatives also see every vote.",
        responses=DeletionConsentStatusSerializer
    )
    def get(self, request, creator_id):
        creator = self.get_creator()
        status = services.get_deletion_consent_status(creator, request.user)
        return Response(DeletionConsentStatusSerializer(status).data)


class ActionHistoryView(LifecycleErrorMixin, generics.ListAPIView):
    """
    Lifecycle action log of a creator, newest first.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = ActionLogSerializer
    pagination_class = StandardResultsPagination

    @extend_schema(
        summary="List lifecycle history",
        description="Representative only; any member may read when no representative exists."
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        creator = User.objects.filter(pk=self.kwargs['creator_id']).first()
        if creator is None:
            raise services.NotFound('Creator not found.')
        return services.get_action_history(creator, self.request.user)


class MyConnectionsView(APIView):
    """
    Creators the current user is family of.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List my connections",
        description="Every creator the current user is an active family member of, "
                    "with lifecycle status and whether a vote is waiting on them.",
        responses=ConnectionSerializer(many=True)
    )
    def get(self, request):
        connections = services.get_my_connections(request.user)
        return Response(ConnectionSerializer(connections, many=True).data)
