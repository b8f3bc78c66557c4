"""
Authentication views for the Keepsake API.

Family members sign in with their email address and act on a creator's
lifecycle with the JWT access token returned here.
"""
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.utils import extend_schema, OpenApiExample

from .serializers import CustomTokenObtainPairSerializer, UserSerializer

logger = logging.getLogger(__name__)


class LoginView(TokenObtainPairView):
    """Exchange email and password for an access/refresh pair plus the user."""
    permission_classes = [AllowAny]
    serializer_class = CustomTokenObtainPairSerializer

    @extend_schema(
        summary="Login with email and password",
        examples=[
            OpenApiExample(
                'Family member login',
                value={'email': 'grace@example.com', 'password': 'securepassword'},
                request_only=True
            )
        ],
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Logout and blacklist the refresh token",
        request={
            'type': 'object',
            'properties': {'refresh': {'type': 'string'}},
        }
    )
    def post(self, request):
        refresh_token = request.data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                return Response(
                    {'error': str(e), 'code': 'INVALID_TOKEN'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            logger.info(f"User {request.user.pk} logged out")
        return Response({'message': 'Logged out successfully.'})


class TokenRefreshAPIView(TokenRefreshView):

    @extend_schema(summary="Refresh access token")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class CurrentUserView(APIView):
    """The signed-in user, with their own lifecycle status and family count."""
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get current user", responses=UserSerializer)
    def get(self, request):
        return Response(UserSerializer(request.user).data)
