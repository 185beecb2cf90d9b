"""
Saturation vapor pressure of water (Tetens correlation).

    Ps(t) = A · exp(B·t / (C + t))        [kPa, t in °C]

The liquid-water coefficients apply at and above 0 °C, the ice coefficients
below. The dew point inverse always uses the water branch, so dew points are
reported over supercooled water even below freezing.
"""

import math
from typing import Optional

from psychro.config import ABSOLUTE_ZERO
from psychro.errors import InvalidInputError
from psychro.models.constants import (
    DEFAULT_CONSTANTS,
    PsychrometricConstants,
    TetensCoefficients,
)


def _coefficients(t: float, constants: PsychrometricConstants) -> TetensCoefficients:
    return constants.tetens_water if t >= 0.0 else constants.tetens_ice


def _tetens(t: float, coeffs: TetensCoefficients) -> float:
    return coeffs.A * math.exp(coeffs.B * t / (coeffs.C + t))


def saturation_pressure(
    t: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Saturation vapor pressure (kPa) over water (t >= 0) or ice (t < 0)."""
    c = constants or DEFAULT_CONSTANTS
    return _tetens(t, _coefficients(t, c))


def saturation_pressure_derivative(
    t: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """dPs/dt (kPa/K) on the same branch as saturation_pressure."""
    c = constants or DEFAULT_CONSTANTS
    coeffs = _coefficients(t, c)
    return _tetens(t, coeffs) * coeffs.B * coeffs.C / (coeffs.C + t) ** 2


def saturation_pressure_over_water(
    t: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Saturation vapor pressure over liquid water at any temperature."""
    c = constants or DEFAULT_CONSTANTS
    return _tetens(t, c.tetens_water)


def lowest_temperature(constants: Optional[PsychrometricConstants] = None) -> float:
    """
    Temperature (°C) at or below which the correlation stops being usable:
    the nearer of the two Tetens poles (t = -C), or absolute zero.
    """
    c = constants or DEFAULT_CONSTANTS
    return max(ABSOLUTE_ZERO, -c.tetens_water.C, -c.tetens_ice.C)


def saturation_temperature(
    pv: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """
    Temperature (°C) at which ``pv`` is the saturation pressure over water.

    Returns -inf for pv == 0: perfectly dry air has no dew point.
    """
    if not math.isfinite(pv) or pv < 0:
        raise InvalidInputError(f"Vapor pressure must be finite and >= 0, got {pv}")
    if pv == 0:
        return -math.inf

    coeffs = (constants or DEFAULT_CONSTANTS).tetens_water
    y = math.log(pv / coeffs.A)
    return coeffs.C * y / (coeffs.B - y)


def vapor_pressure(
    t: float, rh: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Partial vapor pressure (kPa) from dry-bulb and relative humidity (%)."""
    return rh / 100.0 * saturation_pressure(t, constants)
