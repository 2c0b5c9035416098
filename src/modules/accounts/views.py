"""Account API views.

``register`` and ``login`` are public and answer with the account plus a
SimpleJWT token pair; ``me`` returns the caller's own account.
"""

from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet
from rest_framework_simplejwt.tokens import RefreshToken

from modules.accounts.dtos import AccountOutputDTO, RegisterAccountDTO
from modules.accounts.models import Account
from modules.accounts.permissions import HasAccount, request_account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.serializers import LoginSerializer, RegisterSerializer
from modules.accounts.services import AccountService
from modules.core.responses import success_response


def _token_pair(account: Account) -> dict:
    refresh = RefreshToken.for_user(account.user)
    refresh["role"] = account.role
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


def _account_payload(account: Account) -> dict:
    return AccountOutputDTO.from_entity(account).model_dump(mode="json", by_alias=True)


class AccountViewSet(GenericViewSet):
    """Registration, login and profile of marketplace accounts."""

    throttle_scope = "auth"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(repository=AccountDjangoRepository())

    def get_permissions(self):
        if self.action in {"register", "login"}:
            return [AllowAny()]
        return [HasAccount()]

    @action(detail=False, methods=["post"], url_path="register")
    def register(self, request: Request) -> Response:
        """POST /api/v1/accounts/register"""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = RegisterAccountDTO(
            name=data["name"],
            email=data["email"],
            password=data["password"],
            role=data["role"],
            contact=data["contact"],
            farm_name=data["farmName"],
            latitude=data["lat"],
            longitude=data["lng"],
        )
        account = self._service.register(dto)
        return success_response(
            {"account": _account_payload(account), "tokens": _token_pair(account)},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"], url_path="login")
    def login(self, request: Request) -> Response:
        """POST /api/v1/accounts/login"""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"].strip().lower()

        user = authenticate(
            request,
            username=email[:150],
            password=serializer.validated_data["password"],
        )
        if user is None:
            raise AuthenticationFailed("Invalid email or password.")
        account = self._service.get_for_user(user)
        return success_response(
            {"account": _account_payload(account), "tokens": _token_pair(account)}
        )

    @action(detail=False, methods=["get"], url_path="me")
    def me(self, request: Request) -> Response:
        """GET /api/v1/accounts/me"""
        return success_response(_account_payload(request_account(request)))
