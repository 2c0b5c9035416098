"""Reusable pydantic field types."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, Field

COORDINATE_PRECISION = Decimal("0.000001")


def _round_coordinate(value: Decimal) -> Decimal:
    return value.quantize(COORDINATE_PRECISION)


# Six decimal places, the precision of the ``latitude``/``longitude`` columns.
Latitude = Annotated[Decimal, Field(ge=-90, le=90), AfterValidator(_round_coordinate)]
Longitude = Annotated[
    Decimal, Field(ge=-180, le=180), AfterValidator(_round_coordinate)
]
