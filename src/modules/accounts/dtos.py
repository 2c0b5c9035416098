"""Account DTOs.

- ``Caller``: the authenticated principal as seen by services.
- ``RegisterAccountDTO``: input for self-registration.
- ``AccountOutputDTO``: API representation (camelCase keys).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Self
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from modules.accounts.constants import SELF_REGISTRATION_ROLES, Role
from modules.core.fields import Latitude, Longitude

if TYPE_CHECKING:
    from modules.accounts.models import Account


class Caller(BaseModel):
    """Identity and role of the account performing an operation."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ---------------------------------------------------------------------------
# Input DTO
# ---------------------------------------------------------------------------


class RegisterAccountDTO(BaseModel):
    """Immutable DTO for registration requests.

    Farmers must provide a farm name and the farm's coordinates; the
    coordinates seed the default location of the products they list.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role
    contact: str = Field(min_length=1, max_length=50)
    farm_name: str = ""
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("role")
    @classmethod
    def role_must_be_self_assignable(cls, v: Role) -> Role:
        if v not in SELF_REGISTRATION_ROLES:
            raise ValueError("Role must be 'farmer' or 'buyer'.")
        return v

    @model_validator(mode="after")
    def farmer_profile_complete(self) -> Self:
        if self.role == Role.FARMER:
            if not self.farm_name.strip():
                raise ValueError("Farm name is required for farmers.")
            if self.latitude is None or self.longitude is None:
                raise ValueError("Farm location is required for farmers.")
        return self


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class AccountOutputDTO(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: UUID
    name: str
    email: str
    role: str
    contact: str
    farm_name: str
    latitude: Optional[float]
    longitude: Optional[float]
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, account: Account) -> AccountOutputDTO:
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            contact=account.contact,
            farm_name=account.farm_name,
            latitude=float(account.latitude) if account.latitude is not None else None,
            longitude=float(account.longitude)
            if account.longitude is not None
            else None,
            is_active=account.is_active,
            created_at=account.created_at,
        )
