"""
Records views for the Keepsake API.

Writes go through apps.records.services, which refuses them while the
owner's lifecycle is not active.
"""
from rest_framework import mixins, viewsets, status
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from apps.records.models import Conversation
from apps.records.services import ContentLockedError, get_lock_status, create_conversation, delete_conversation
from api.permissions import IsOwner
from api.pagination import StandardResultsPagination

from .serializers import ConversationSerializer, LockStatusSerializer


class ConversationViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.CreateModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    """
    ViewSet for the current user's conversations.
    """
    permission_classes = [IsAuthenticated, IsOwner]
    serializer_class = ConversationSerializer
    pagination_class = StandardResultsPagination
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        return Conversation.objects.filter(user=self.request.user)

    def handle_exception(self, exc):
        if isinstance(exc, ContentLockedError):
            return Response(
                {'error': str(exc), 'code': 'LIFECYCLE_LOCKED', 'lifecycle_status': exc.lifecycle_status},
                status=status.HTTP_409_CONFLICT
            )
        return super().handle_exception(exc)

    @extend_schema(summary="List conversations")
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(summary="Get a conversation")
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary="Create a conversation",
        description="Rejected with 409 LIFECYCLE_LOCKED once a death has been reported."
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    @extend_schema(
        summary="Delete a conversation",
        description="Rejected with 409 LIFECYCLE_LOCKED once a death has been reported."
    )
    def destroy(self, request, *args, **kwargs):
        return super().destroy(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.instance = create_conversation(self.request.user, **serializer.validated_data)

    def perform_destroy(self, instance):
        delete_conversation(self.request.user, instance)


class LockStatusView(APIView):
    """
    Whether the current user's record is frozen.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get record lock status", responses=LockStatusSerializer)
    def get(self, request):
        return Response(LockStatusSerializer(get_lock_status(request.user)).data)
