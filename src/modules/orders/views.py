"""Order API views.

Exposes ``OrderService`` over HTTP with a DRF ``GenericViewSet``.  All
ORM access goes through the service/repository layer, and domain errors
propagate to the envelope exception handler, so no action catches them.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.permissions import (
    HasAccount,
    IsAdmin,
    IsAdminOrPaymentProcessor,
    IsBuyer,
    IsFarmer,
    IsFarmerOrAdmin,
)
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.services import AccountService
from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import success_response
from modules.orders.dtos import (
    CreateOrderDTO,
    CreateOrderItemDTO,
    OrderOutputDTO,
    ShippingAddressDTO,
)
from modules.orders.filters import OrderFilter, SortByFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    PaymentStatusSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import (
    SCOPE_ALL,
    SCOPE_MINE,
    SCOPE_RECEIVED,
    OrderService,
)
from modules.products.repositories.django_repository import ProductDjangoRepository


def _order_payload(order: Order) -> dict:
    return OrderOutputDTO.from_entity(order).model_dump(mode="json", by_alias=True)


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories.  Does **not** extend
    ``ModelViewSet``.
    """

    queryset = Order.objects.none()
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend, SortByFilter]
    pagination_class = StandardResultsSetPagination

    permission_map = {
        "create": IsBuyer,
        "list": IsAdmin,
        "my_orders": IsBuyer,
        "received": IsFarmer,
        "update_status": IsFarmerOrAdmin,
        "payment": IsAdminOrPaymentProcessor,
        "destroy": IsAdmin,
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        account_repo = AccountDjangoRepository()
        self._accounts = AccountService(repository=account_repo)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            account_repository=account_repo,
        )

    def get_permissions(self):
        permission_class = self.permission_map.get(self.action, HasAccount)
        return [permission_class()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scope per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "my_orders", "received", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        address = data["shippingAddress"]

        caller = self._accounts.resolve_caller(request.user)
        dto = CreateOrderDTO(
            buyer_id=caller.id,
            items=[
                CreateOrderItemDTO(product_id=line["product"], quantity=line["quantity"])
                for line in data["products"]
            ],
            shipping_address=ShippingAddressDTO(
                street=address["street"],
                city=address["city"],
                country=address["country"],
                postal_code=address["postalCode"],
            ),
            payment_method=data["paymentMethod"],
            notes=data["notes"],
        )
        order = self._service.create_order(dto)
        return success_response(_order_payload(order), status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders (admin)"""
        return self._scoped_list(request, SCOPE_ALL)

    @action(detail=False, methods=["get"], url_path="my-orders")
    def my_orders(self, request: Request) -> Response:
        """GET /api/v1/orders/my-orders"""
        return self._scoped_list(request, SCOPE_MINE)

    @action(detail=False, methods=["get"], url_path="received")
    def received(self, request: Request) -> Response:
        """GET /api/v1/orders/received"""
        return self._scoped_list(request, SCOPE_RECEIVED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}"""
        caller = self._accounts.resolve_caller(request.user)
        return success_response(_order_payload(self._service.get_order(pk, caller)))

    def _scoped_list(self, request: Request, scope: str) -> Response:
        """Filtering by ``OrderFilter``, ``sortBy``/``sortOrder`` ordering,
        page-number pagination."""
        caller = self._accounts.resolve_caller(request.user)
        queryset = self.filter_queryset(self._service.list_orders(caller, scope))
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response([_order_payload(o) for o in page])

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status"""
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        caller = self._accounts.resolve_caller(request.user)
        order = self._service.update_status(
            pk,
            serializer.validated_data["status"],
            caller,
            notes=serializer.validated_data["notes"],
        )
        return success_response(_order_payload(order))

    @action(detail=True, methods=["patch"], url_path="cancel")
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/cancel"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        caller = self._accounts.resolve_caller(request.user)
        order = self._service.cancel_order(
            pk, caller, reason=serializer.validated_data["reason"]
        )
        return success_response(_order_payload(order))

    @action(detail=True, methods=["patch"], url_path="payment")
    def payment(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/payment"""
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        caller = self._accounts.resolve_caller(request.user)
        order = self._service.update_payment_status(
            pk,
            data["paymentStatus"],
            caller,
            transaction_id=data["transactionId"],
            notes=data["notes"],
        )
        return success_response(_order_payload(order))

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk} (admin soft delete)"""
        caller = self._accounts.resolve_caller(request.user)
        self._service.delete_order(pk, caller)
        return success_response({"id": pk, "deleted": True})
