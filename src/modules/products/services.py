"""Product service layer (Use Cases).

Rules enforced here:
- Only farmers list products; only the owning farmer (or an admin)
  updates or deletes them.
- Products without coordinates inherit the farmer's location.
- Radius search: bounding-box pre-filter in SQL, exact haversine distance
  in Python, results sorted nearest first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Tuple

import structlog
from django.db import models, transaction

from modules.accounts.constants import Role
from modules.core.exceptions import AuthorizationError
from modules.products.exceptions import NotProductOwner, ProductNotFound
from modules.products.geo import bounding_box, haversine_km
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.accounts.dtos import Caller
    from modules.accounts.repositories.interfaces import IAccountRepository
    from modules.products.dtos import (
        CreateProductDTO,
        NearbySearchDTO,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = (
    "name",
    "price",
    "quantity",
    "category",
    "description",
    "images",
    "latitude",
    "longitude",
)


class ProductService:
    """Application service for Product use-cases.

    Receives its repositories via constructor injection.
    """

    def __init__(
        self,
        repository: IProductRepository,
        account_repository: IAccountRepository,
    ) -> None:
        self._repo = repository
        self._account_repo = account_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        farmer = self._account_repo.get_by_id(str(dto.farmer_id))
        if not farmer or not farmer.is_active or farmer.role != Role.FARMER:
            raise AuthorizationError("Only active farmers can list products.")

        latitude, longitude = dto.latitude, dto.longitude
        if latitude is None or longitude is None:
            latitude, longitude = farmer.latitude, farmer.longitude

        product = Product(
            farmer=farmer,
            name=dto.name,
            description=dto.description,
            price=dto.price,
            quantity=dto.quantity,
            category=dto.category,
            images=list(dto.images),
            latitude=latitude,
            longitude=longitude,
        )
        product = self._repo.save(product)
        logger.info(
            "product.created",
            product_id=str(product.id),
            farmer_id=str(farmer.id),
            quantity=product.quantity,
        )
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO, caller: Caller) -> Product:
        """Apply the supplied fields.

        Raises:
            ProductNotFound: unknown or deleted product.
            NotProductOwner: caller is neither the owner nor an admin.
        """
        product = self._repo.get_for_update(id)
        if not product:
            raise ProductNotFound()
        self._ensure_can_modify(product, caller)

        changed: List[str] = []
        for field in _UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, list(value) if field == "images" else value)
                changed.append(field)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id), fields=changed)
        return self._repo.get_by_id(str(product.id)) or product

    @transaction.atomic
    def delete_product(self, id: str, caller: Caller) -> None:
        """Soft-delete a product; existing order lines keep their snapshot."""
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound()
        self._ensure_can_modify(product, caller)
        self._repo.delete(id)
        logger.info("product.deleted", product_id=str(id), actor_id=str(caller.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound()
        return product

    def base_queryset(self) -> "models.QuerySet[Product]":
        return self._repo.list()

    def search_nearby(
        self,
        queryset: "models.QuerySet[Product]",
        search: NearbySearchDTO,
    ) -> List[Tuple[Product, float]]:
        """Products of ``queryset`` within ``search.radius_km``, nearest first."""
        box = bounding_box(search.latitude, search.longitude, search.radius_km)
        candidates = self._repo.list_within(queryset, box)
        results = list(self._with_distance(candidates, search))
        results.sort(key=lambda pair: pair[1])
        logger.info(
            "product.nearby_search",
            radius_km=search.radius_km,
            candidates=len(candidates),
            matches=len(results),
        )
        return results

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _with_distance(
        products: Iterable[Product], search: NearbySearchDTO
    ) -> Iterable[Tuple[Product, float]]:
        for product in products:
            coordinates = product.coordinates()
            if coordinates is None:
                continue
            distance = haversine_km(
                search.latitude, search.longitude, coordinates[0], coordinates[1]
            )
            if distance <= search.radius_km:
                yield product, distance

    @staticmethod
    def _ensure_can_modify(product: Product, caller: Caller) -> None:
        if caller.is_admin:
            return
        if caller.role != Role.FARMER or product.farmer_id != caller.id:
            logger.warning(
                "product.modify_forbidden",
                product_id=str(product.id),
                actor_id=str(caller.id),
            )
            raise NotProductOwner()
