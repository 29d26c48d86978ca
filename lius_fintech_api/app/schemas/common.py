"""
Shared schema pieces: the money type and the response envelope.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, PlainSerializer

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round ``value`` to whole cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# Decimal in Python, plain JSON number on the wire and in the data files.
Money = Annotated[
    Decimal,
    AfterValidator(quantize_money),
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class Envelope(BaseModel):
    """Every response carries ``success`` and, usually, a ``message``."""

    success: bool = True
    message: str | None = None


class ErrorResponse(Envelope):
    """Body returned for every failed request."""

    success: bool = False
    message: str = Field(..., examples=["User not found"])
