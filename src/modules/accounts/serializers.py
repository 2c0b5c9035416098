"""Account request serializers (camelCase wire format)."""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.constants import Role


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=[Role.FARMER, Role.BUYER])
    contact = serializers.CharField(max_length=50)
    farmName = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )
    lat = serializers.DecimalField(
        max_digits=12,
        decimal_places=8,
        min_value=-90,
        max_value=90,
        required=False,
        allow_null=True,
        default=None,
    )
    lng = serializers.DecimalField(
        max_digits=12,
        decimal_places=8,
        min_value=-180,
        max_value=180,
        required=False,
        allow_null=True,
        default=None,
    )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
