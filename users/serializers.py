import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.cache import cache
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

CustomUser = get_user_model()
logger = logging.getLogger(__name__)


class SimpleUserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = CustomUser
        fields = (
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "role",
            "created_at",
        )
        read_only_fields = ("id", "email", "role", "created_at")


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    MAX_LOGIN_ATTEMPTS = 5

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        token["email"] = user.email
        return token

    def validate(self, attrs):
        email = (attrs.get(self.username_field) or "").strip().lower()
        attrs[self.username_field] = email

        cache_key = f"login_attempts:{email}"
        attempts = cache.get(cache_key, 0)
        if attempts >= self.MAX_LOGIN_ATTEMPTS:
            raise serializers.ValidationError(
                {"detail": "Too many failed login attempts. Try again later."}
            )
        cache.set(cache_key, attempts + 1, timeout=3600)

        data = super().validate(attrs)
        cache.delete(cache_key)

        logger.info("Login successful for user %s", self.user.id)
        data["user"] = SimpleUserSerializer(self.user).data
        return data


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, style={"input_type": "password"})

    class Meta:
        model = CustomUser
        fields = ["email", "password", "first_name", "last_name", "phone"]

    def validate_email(self, value):
        value = value.strip().lower()
        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        """Customer self-registration; the role is never taken from the payload."""
        return CustomUser.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            first_name=validated_data.get("first_name", ""),
            last_name=validated_data.get("last_name", ""),
            phone=validated_data.get("phone", ""),
            role=CustomUser.Role.CUSTOMER,
        )
