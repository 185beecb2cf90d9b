"""
Moist-air property relations.

Every function takes temperatures in °C, pressures in kPa, humidity ratios in
kg_w/kg_da and enthalpies in kJ/kg_da. ``constants`` defaults to the
process-wide defaults; pass a resolved PsychrometricConstants to override.

    x  = ε · Pv / (P - Pv)
    h  = cp_a · t + x · (L0 + cp_v · t)
    v  = R_da · (t + 273.15) · (1 + 1.608·x) / P

Wet-bulb temperature follows the psychrometer equation

    Pv = Ps(twb) - k · P · (t - twb)

solved for twb by Newton-Raphson; the inverse direction (humidity ratio from a
known wet bulb) is the same equation evaluated directly.
"""

import logging
import math
import warnings
from typing import Optional

from scipy.optimize import newton

from psychro.engine.saturation import (
    saturation_pressure,
    saturation_pressure_derivative,
    saturation_pressure_over_water,
    saturation_temperature,
    vapor_pressure,
)
from psychro.errors import ConvergenceWarning, InvalidInputError
from psychro.models.constants import DEFAULT_CONSTANTS, PsychrometricConstants

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Humidity ratio / vapor pressure
# ---------------------------------------------------------------------------

def humidity_from_vapor_pressure(
    pv: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    c = constants or DEFAULT_CONSTANTS
    if pv >= pressure:
        raise InvalidInputError(
            f"Vapor pressure {pv:.3f} kPa is not below total pressure {pressure:.3f} kPa"
        )
    return c.molecular_weight_ratio * pv / (pressure - pv)


def vapor_pressure_from_humidity(
    x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    c = constants or DEFAULT_CONSTANTS
    return x * pressure / (c.molecular_weight_ratio + x)


def absolute_humidity(
    t: float, rh: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Humidity ratio from dry-bulb and relative humidity (%)."""
    return humidity_from_vapor_pressure(vapor_pressure(t, rh, constants), pressure, constants)


def relative_humidity(
    t: float,
    x: float,
    pressure: float,
    constants: Optional[PsychrometricConstants] = None,
    clamp: bool = True,
) -> float:
    """
    Relative humidity (%) from dry-bulb and humidity ratio.

    With ``clamp=False`` the raw ratio is returned, which may exceed 100 for
    supersaturated air. Root-finding needs the unclamped, monotone form.
    """
    rh = 100.0 * vapor_pressure_from_humidity(x, pressure, constants) / saturation_pressure(t, constants)
    if clamp:
        return min(max(rh, 0.0), 100.0)
    return rh


def saturation_humidity(
    t: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Humidity ratio at saturation; inf once Ps reaches the total pressure."""
    ps = saturation_pressure(t, constants)
    if ps >= pressure:
        return math.inf
    return humidity_from_vapor_pressure(ps, pressure, constants)


def degree_of_saturation(
    t: float, x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    x_sat = saturation_humidity(t, pressure, constants)
    if not math.isfinite(x_sat) or x_sat <= 0:
        return 0.0
    return x / x_sat


# ---------------------------------------------------------------------------
# Enthalpy
# ---------------------------------------------------------------------------

def enthalpy(t: float, x: float, constants: Optional[PsychrometricConstants] = None) -> float:
    c = constants or DEFAULT_CONSTANTS
    return c.cp_air * t + x * (c.latent_heat_0c + c.cp_vapor * t)


def temperature_from_enthalpy(
    h: float, x: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    c = constants or DEFAULT_CONSTANTS
    return (h - x * c.latent_heat_0c) / (c.cp_air + x * c.cp_vapor)


def humidity_from_enthalpy(
    t: float, h: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    c = constants or DEFAULT_CONSTANTS
    return (h - c.cp_air * t) / (c.latent_heat_0c + c.cp_vapor * t)


def cp_moist_air(x: float, constants: Optional[PsychrometricConstants] = None) -> float:
    """Specific heat of moist air per unit dry air (kJ/kg·K)."""
    c = constants or DEFAULT_CONSTANTS
    return c.cp_air + x * c.cp_vapor


# ---------------------------------------------------------------------------
# Wet bulb
# ---------------------------------------------------------------------------

def vapor_pressure_from_wet_bulb(
    t: float, twb: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Psychrometer equation. Negative when twb is too low for any real air."""
    c = constants or DEFAULT_CONSTANTS
    return saturation_pressure(twb, c) - c.wet_bulb_coefficient * pressure * (t - twb)


def humidity_from_wet_bulb(
    t: float, twb: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Humidity ratio from dry-bulb and wet-bulb; floored at zero."""
    pv = max(vapor_pressure_from_wet_bulb(t, twb, pressure, constants), 0.0)
    return humidity_from_vapor_pressure(pv, pressure, constants)


def solve_wet_bulb(
    t: float, x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> tuple[float, bool]:
    """
    Newton-Raphson solve of the psychrometer equation for the wet bulb.

    Starts from the dew point (from ``t`` for bone-dry air) and stops once the
    step is below ``convergence_tolerance`` or after ``max_iterations``.

    Returns:
        (twb, converged). On non-convergence twb is the last iterate.
    """
    c = constants or DEFAULT_CONSTANTS
    pv = vapor_pressure_from_humidity(x, pressure, c)
    k_p = c.wet_bulb_coefficient * pressure

    def residual(twb: float) -> float:
        return saturation_pressure(twb, c) - pv - k_p * (t - twb)

    def slope(twb: float) -> float:
        return saturation_pressure_derivative(twb, c) + k_p

    guess = saturation_temperature(pv, c) if pv > 0 else t
    guess = min(guess, t)

    root, info = newton(
        residual,
        guess,
        fprime=slope,
        tol=c.convergence_tolerance,
        maxiter=c.max_iterations,
        full_output=True,
        disp=False,
    )
    return float(root), bool(info.converged)


def wet_bulb_temperature(
    t: float, x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Wet-bulb temperature (°C). Non-convergence is logged and warned, not raised."""
    twb, converged = solve_wet_bulb(t, x, pressure, constants)
    if not converged:
        logger.warning(
            "Wet-bulb iteration did not converge (Tdb=%.3f, W=%.6f, P=%.3f); "
            "using last iterate %.4f",
            t, x, pressure, twb,
        )
        warnings.warn(
            f"Wet-bulb iteration did not converge at Tdb={t}, W={x}",
            ConvergenceWarning,
            stacklevel=2,
        )
    return twb


# ---------------------------------------------------------------------------
# Dew point
# ---------------------------------------------------------------------------

def dew_point(
    x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Dew point over liquid water; -inf for x == 0."""
    return saturation_temperature(vapor_pressure_from_humidity(x, pressure, constants), constants)


def humidity_from_dew_point(
    tdp: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    return humidity_from_vapor_pressure(
        saturation_pressure_over_water(tdp, constants), pressure, constants
    )


# ---------------------------------------------------------------------------
# Volume / density
# ---------------------------------------------------------------------------

def specific_volume(
    t: float, x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    """Specific volume (m³/kg_da)."""
    c = constants or DEFAULT_CONSTANTS
    return c.r_air * (t + 273.15) * (1.0 + c.vapor_volume_factor * x) / pressure


def air_density(
    t: float, x: float, pressure: float, constants: Optional[PsychrometricConstants] = None
) -> float:
    return 1.0 / specific_volume(t, x, pressure, constants)
