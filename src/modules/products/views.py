"""Product API views.

Listing and retrieval are public; writes need a farmer account (admins
may moderate).  Domain errors propagate to the envelope exception handler.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.permissions import IsFarmer, IsFarmerOrAdmin, request_account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.services import AccountService
from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import success_response
from modules.products.dtos import (
    CreateProductDTO,
    NearbySearchDTO,
    ProductOutputDTO,
    UpdateProductDTO,
)
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import NearbyQuerySerializer, ProductWriteSerializer
from modules.products.services import ProductService


def _product_payload(product: Product, distance_km: float | None = None) -> dict:
    return ProductOutputDTO.from_entity(product, distance_km).model_dump(
        mode="json", by_alias=True
    )


class ProductViewSet(GenericViewSet):
    """Catalog endpoints backed by ``ProductService``."""

    filterset_class = ProductFilter
    ordering_fields = ["price", "created_at", "name", "quantity"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    pagination_class = StandardResultsSetPagination
    queryset = Product.objects.none()

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        account_repo = AccountDjangoRepository()
        self._accounts = AccountService(repository=account_repo)
        self._service = ProductService(
            repository=ProductDjangoRepository(),
            account_repository=account_repo,
        )

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]
        if self.action == "create":
            return [IsFarmer()]
        return [IsFarmerOrAdmin()]

    def get_queryset(self):
        return self._service.base_queryset()

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products

        Supports ``lat``/``lng``/``distance`` (km) on top of the regular
        filters; a radius search is ordered by distance.
        """
        nearby = NearbyQuerySerializer(data=request.query_params)
        nearby.is_valid(raise_exception=True)
        queryset = self.filter_queryset(self.get_queryset())

        if "lat" in nearby.validated_data:
            search = NearbySearchDTO(
                latitude=float(nearby.validated_data["lat"]),
                longitude=float(nearby.validated_data["lng"]),
                radius_km=nearby.validated_data["distance"],
            )
            matches = self._service.search_nearby(queryset, search)
            page = self.paginate_queryset(matches)
            return self.get_paginated_response(
                [_product_payload(product, distance) for product, distance in page]
            )

        page = self.paginate_queryset(queryset)
        return self.get_paginated_response([_product_payload(p) for p in page])

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}"""
        return success_response(_product_payload(self._service.get_product(pk)))

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products"""
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = CreateProductDTO(
            farmer_id=request_account(request).id,
            name=data["name"],
            description=data["description"],
            price=data["price"],
            quantity=data["quantity"],
            category=data["category"],
            images=data["images"],
            latitude=data["lat"],
            longitude=data["lng"],
        )
        product = self._service.create_product(dto)
        return success_response(_product_payload(product), status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}"""
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = UpdateProductDTO(
            name=data.get("name"),
            description=data.get("description"),
            price=data.get("price"),
            quantity=data.get("quantity"),
            category=data.get("category"),
            images=data.get("images"),
            latitude=data.get("lat"),
            longitude=data.get("lng"),
        )
        caller = self._accounts.resolve_caller(request.user)
        product = self._service.update_product(pk, dto, caller)
        return success_response(_product_payload(product))

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}"""
        caller = self._accounts.resolve_caller(request.user)
        self._service.delete_product(pk, caller)
        return success_response({"id": pk, "deleted": True})
