"""Serializers for authentication API."""

from django.contrib.auth import password_validation
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from auth_app.models import UserProfile, get_profile
from core.errors import QuizAppError


class RegistrationSerializer(serializers.ModelSerializer):
    """Serializer for user registration with password confirmation and role."""

    confirmed_password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=UserProfile.Role.choices, default=UserProfile.Role.STUDENT)
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'confirmed_password', 'role', 'display_name']
        extra_kwargs = {
            'password': {
                'write_only': True
            },
            'email': {
                'required': True
            }
        }

    def validate_confirmed_password(self, value):
        """Validate that the confirmed password matches the password."""
        password = self.initial_data.get('password')
        if password and value and password != value:
            raise serializers.ValidationError('Passwords do not match')
        return value

    def validate_email(self, value):
        """Validate that the email is unique."""
        if User.objects.filter(email__iexact=value).exists():
            raise QuizAppError("auth/email-already-in-use")
        return value

    def validate_password(self, value):
        """Run Django's password validators."""
        try:
            password_validation.validate_password(value)
        except DjangoValidationError as e:
            raise QuizAppError("auth/weak-password", detail=e.messages)
        return value

    def save(self):
        """Create the user with a hashed password and its profile."""
        data = self.validated_data
        account = User(email=data['email'], username=data['username'])
        account.set_password(data['password'])
        account.save()

        UserProfile.objects.create(
            user=account,
            role=data['role'],
            display_name=data.get('display_name') or account.username,
        )
        return account


class CookieTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token serializer that includes user and profile information in the response."""

    def validate(self, attrs):
        """Validate credentials and include user data in the response."""
        try:
            data = super().validate(attrs)
        except exceptions.AuthenticationFailed:
            raise QuizAppError(self._failure_code(attrs.get(self.username_field)))

        profile = get_profile(self.user)
        profile.last_login_at = timezone.now()
        profile.save(update_fields=['last_login_at', 'updated_at'])

        data['user'] = {
            'id': self.user.id,
            'username': self.user.username,
            'email': self.user.email,
            'display_name': profile.display_name,
            'role': profile.role,
        }
        return data

    def _failure_code(self, username):
        user = User.objects.filter(username=username).first()
        if user is None:
            return "auth/user-not-found"
        if not user.is_active:
            return "auth/user-disabled"
        return "auth/wrong-password"


class ProfileSerializer(serializers.ModelSerializer):
    """Read-only view of the signed-in user's profile."""

    id = serializers.IntegerField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = UserProfile
        fields = ['id', 'username', 'email', 'display_name', 'role', 'created_at', 'updated_at', 'last_login_at']
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Only the display name of a profile can be changed."""

    class Meta:
        model = UserProfile
        fields = ['display_name']
        extra_kwargs = {
            'display_name': {'required': True, 'allow_blank': False},
        }
