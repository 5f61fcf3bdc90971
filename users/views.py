"""Staff authentication endpoints.

Scan stations sign in once per shift and refresh the access token in the
background; signing out blacklists the refresh token.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from .logging import log_auth_event
from .serializers import IdentifierTokenObtainPairSerializer, UserMeSerializer


@extend_schema(
    operation_id="users_current_user",
    summary="Current staff profile",
    tags=["Auth"],
    responses={
        200: OpenApiResponse(description="Staff profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    return Response(UserMeSerializer(request.user).data)


current_user.throttle_scope = "profile"


class SignInView(APIView):
    """Exchange staff credentials for a JWT pair plus the staff profile."""

    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"

    @extend_schema(
        tags=["Auth"],
        summary="Sign in",
        request=IdentifierTokenObtainPairSerializer,
        responses={200: OpenApiResponse(description="access, refresh and user"), 401: OpenApiResponse()},
    )
    def post(self, request):
        serializer = IdentifierTokenObtainPairSerializer(data=request.data)
        identifier = request.data.get("identifier")
        if not serializer.is_valid():
            log_auth_event("signin", request, status="failed", extra={"identifier": identifier})
            return Response({"detail": "Invalid credentials."}, status=status.HTTP_401_UNAUTHORIZED)
        user = serializer.validated_data["user"]
        log_auth_event("signin", request, user=user)
        return Response(
            {
                "access": serializer.validated_data["access"],
                "refresh": serializer.validated_data["refresh"],
                "user": UserMeSerializer(user).data,
            }
        )


class SignOutView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"

    @extend_schema(tags=["Auth"], summary="Sign out (blacklist refresh token)")
    def post(self, request):
        refresh = request.data.get("refresh")
        if not refresh:
            return Response({"detail": "Refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            RefreshToken(refresh).blacklist()
        except TokenError:
            log_auth_event("signout", request, status="invalid_token")
            return Response({"detail": "Invalid token."}, status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("signout", request)
        return Response({"detail": "Signed out."}, status=status.HTTP_205_RESET_CONTENT)


class _LoggedTokenView:
    auth_action = ""

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        log_auth_event(self.auth_action, request, status="success" if response.status_code == 200 else "failed")
        return response


@extend_schema(tags=["Auth"], summary="Refresh access token")
class RefreshView(_LoggedTokenView, TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"
    auth_action = "token_refresh"


@extend_schema(tags=["Auth"], summary="Verify a token")
class VerifyView(_LoggedTokenView, TokenVerifyView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_verify"
    auth_action = "token_verify"
