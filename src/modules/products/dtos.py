"""Product DTOs for the Service Layer.

Immutable pydantic models exchanged between views and ``ProductService``.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial updates by the owner.
- ``NearbySearchDTO``: centre and radius of a catalog radius search.
- ``ProductOutputDTO``: API representation (camelCase keys).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from modules.core.fields import Latitude, Longitude

if TYPE_CHECKING:
    from modules.products.models import Product

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    When no coordinates are supplied the service falls back to the
    farmer's own location.
    """

    model_config = ConfigDict(frozen=True)

    farmer_id: UUID
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, decimal_places=2)
    quantity: int = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)
    description: str = ""
    images: List[str] = Field(default_factory=list)
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None

    @field_validator("name", "category")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Must not be blank.")
        return v.strip()


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product updates.  Only supplied fields change."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    quantity: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    images: Optional[List[str]] = None
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None


class NearbySearchDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    radius_km: float = Field(gt=0)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class _CamelOutput(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class FarmerSummaryDTO(_CamelOutput):
    id: UUID
    name: str
    farm_name: str


class ProductOutputDTO(_CamelOutput):
    id: UUID
    name: str
    description: str
    price: Decimal
    quantity: int
    category: str
    images: List[str]
    farmer: FarmerSummaryDTO
    latitude: Optional[float]
    longitude: Optional[float]
    distance_km: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls, product: Product, distance_km: Optional[float] = None
    ) -> ProductOutputDTO:
        """Build an output DTO; ``farmer`` should be ``select_related``."""
        coordinates = product.coordinates()
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            quantity=product.quantity,
            category=product.category,
            images=list(product.images or []),
            farmer=FarmerSummaryDTO(
                id=product.farmer.id,
                name=product.farmer.name,
                farm_name=product.farmer.farm_name,
            ),
            latitude=coordinates[0] if coordinates else None,
            longitude=coordinates[1] if coordinates else None,
            distance_km=round(distance_km, 3) if distance_km is not None else None,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
