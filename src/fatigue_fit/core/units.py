"""
Weight unit helpers.

Weights are stored in kilograms; the display unit only affects input
parsing and formatting.
"""

import math
from typing import Final

from .models import WeightUnit

LB_TO_KG: Final[float] = 0.453592
KG_TO_LB: Final[float] = 2.20462

# Display rounding step per unit
ROUNDING: Final[dict[str, float]] = {"kg": 0.5, "lb": 2.5}


def to_kg(value: float, unit: WeightUnit) -> float:
    """Convert a weight in *unit* to kilograms."""
    if unit == "kg":
        return value
    return value * LB_TO_KG


def from_kg(value_kg: float, unit: WeightUnit) -> float:
    """Convert kilograms to *unit*."""
    if unit == "kg":
        return value_kg
    return value_kg * KG_TO_LB


def round_weight(value: float, unit: WeightUnit) -> float:
    """Round to the nearest plate step (0.5 kg / 2.5 lb); halves round up."""
    step = ROUNDING[unit]
    return math.floor(value / step + 0.5) * step


def format_weight(value_kg: float, unit: WeightUnit) -> str:
    """
    Format a stored weight for display.

    >>> format_weight(100, "kg")
    '100kg'
    >>> format_weight(100, "lb")
    '220lb'
    """
    display = round_weight(from_kg(value_kg, unit), unit)
    return f"{display:g}{unit}"


def parse_weight_input(text: str, unit: WeightUnit) -> float:
    """
    Parse user input in *unit* and return kilograms.

    Unparseable input gives 0.
    """
    try:
        value = float(text.strip())
    except ValueError:
        return 0.0
    if value != value:  # NaN
        return 0.0
    return to_kg(value, unit)
