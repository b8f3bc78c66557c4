"""
Authentication serializers for the Keepsake API.
"""
from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.accounts.models import FamilyMember
from apps.lifecycle.models import get_lifecycle_status


class UserSerializer(serializers.ModelSerializer):
    lifecycle_status = serializers.SerializerMethodField()
    family_count = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'lifecycle_status', 'family_count']
        read_only_fields = fields

    def get_lifecycle_status(self, obj):
        return get_lifecycle_status(obj)

    def get_family_count(self, obj):
        """Families the user votes in, not counting their own."""
        return FamilyMember.get_memberships_of(obj).count()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT login keyed on email; usernames are never shown to families."""
    username_field = 'email'

    def validate(self, attrs):
        email = attrs.get('email')
        password = attrs.get('password')

        account = User.objects.filter(email__iexact=email).first() if email else None
        user = None
        if account is not None and password:
            user = authenticate(
                request=self.context.get('request'),
                username=account.username,
                password=password
            )

        # Same message for unknown email and wrong password.
        if user is None:
            raise serializers.ValidationError({'detail': 'Invalid email or password.'})

        refresh = self.get_token(user)
        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
        }
