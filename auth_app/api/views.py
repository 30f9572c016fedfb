"""API views for user authentication including registration, login, token refresh, logout and profile."""

import logging

from rest_framework import status, views, permissions, response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.tokens import RefreshToken

from auth_app.models import get_profile
from core.errors import QuizAppError
from .serializers import (
    RegistrationSerializer,
    CookieTokenObtainPairSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
)

logger = logging.getLogger(__name__)

REFRESH_COOKIE_PATH = "/api/token/refresh/"


class RegistrationView(views.APIView):
    """Handle user registration."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        """Create a new user account with its role profile."""
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = serializer.save()
        logger.info("Registered user %s as %s", account.username, account.profile.role)
        return response.Response({"detail": "User created successfully!"}, status=status.HTTP_201_CREATED)


class LoginView(TokenObtainPairView):
    """Handle user login and set authentication cookies."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    serializer_class = CookieTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        """Authenticate user and set access and refresh tokens as HTTP-only cookies."""
        res = super().post(request, *args, **kwargs)
        if res.status_code != 200:
            return res

        access = res.data.get("access")
        refresh = res.data.get("refresh")

        if access and refresh:
            res.set_cookie("access_token", access, httponly=True, secure=True, samesite="Lax", path="/")
            res.set_cookie("refresh_token", refresh, httponly=True, secure=True, samesite="Lax", path=REFRESH_COOKIE_PATH)

        user = res.data.get("user")

        res.data = {
            "detail": "Login successfully!",
            "user": user
        }

        return res


class CookieTokenRefreshView(TokenRefreshView):
    """Handle token refresh using cookie-stored refresh token."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        """Refresh access token using the refresh token from cookies."""
        refresh = request.COOKIES.get("refresh_token")
        if not refresh:
            raise QuizAppError("auth/invalid-token", "Refresh token invalid or missing.")

        serializer = self.get_serializer(data={"refresh": refresh})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError:
            raise QuizAppError("auth/invalid-token", "Refresh token invalid or missing.")

        access = serializer.validated_data.get("access")
        res = response.Response({
            "detail": "Token refreshed",
            "access": access
        })
        if access:
            res.set_cookie("access_token", access, httponly=True, secure=True, samesite="Lax", path="/")

        return res


class LogoutView(views.APIView):
    """Handle user logout and token invalidation."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        """Blacklist refresh token and delete authentication cookies."""
        refresh = request.COOKIES.get("refresh_token")
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except TokenError:
                logger.info("Logout with an already invalid refresh token for user %s", request.user.pk)

        res = response.Response({
            "detail": "Log-Out successfully! All Tokens will be deleted. Refresh token is now invalid."
        })

        res.delete_cookie("access_token", path="/")
        res.delete_cookie("refresh_token", path=REFRESH_COOKIE_PATH)

        return res


class ProfileView(views.APIView):
    """Read or rename the signed-in user's profile."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        profile = get_profile(request.user)
        return response.Response(ProfileSerializer(profile).data, status=status.HTTP_200_OK)

    def patch(self, request):
        """Update the display name; every other field is read-only."""
        profile = get_profile(request.user)
        serializer = ProfileUpdateSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return response.Response(ProfileSerializer(profile).data, status=status.HTTP_200_OK)
