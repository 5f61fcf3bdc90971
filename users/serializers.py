"""Serializers for staff sign-in and the profile endpoint."""

from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserMeSerializer(serializers.ModelSerializer):
    """Staff profile with the organization the account works for."""

    organization = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "organization"]

    def get_organization(self, obj):
        if not obj.organization_id:
            return None
        return {"id": obj.organization_id, "name": obj.organization.name}


def find_staff(identifier: str):
    identifier = (identifier or "").strip()
    return User.objects.filter(email=identifier.lower()).first() or User.objects.filter(username=identifier).first()


class IdentifierTokenObtainPairSerializer(serializers.Serializer):
    """Sign in with ``identifier`` (username or email) and ``password``.

    The access token carries ``organization_id`` so scan stations can scope
    requests without another profile call.
    """

    identifier = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = find_staff(attrs.get("identifier"))
        if user is None or not user.is_active or not user.check_password(attrs.get("password")):
            raise serializers.ValidationError({"detail": "Invalid credentials."})
        refresh = RefreshToken.for_user(user)
        refresh["organization_id"] = user.organization_id
        return {"refresh": str(refresh), "access": str(refresh.access_token), "user": user}
