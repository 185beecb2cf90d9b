"""
Core state point resolver.

Given any supported pair of independent psychrometric properties and the total
pressure, resolves all other properties of the moist air.

Every pair is first reduced to dry-bulb + humidity ratio, which is the
canonical path. Pairs with a closed form (Tdb+RH, Tdb+Twb, W+h, ...) go there
directly; the rest use scipy bisection on the dry-bulb temperature.
"""

import logging
import math
import warnings
from typing import Any, Callable, Optional

import psychrolib
from scipy.optimize import bisect

from psychro.config import (
    DEW_POINT_W_TOLERANCE,
    SEARCH_TDB_MAX,
    SEARCH_TDB_MIN,
    SUPPORTED_INPUT_PAIRS,
    WET_BULB_SEARCH_SPAN,
    PropertyKind,
)
from psychro.engine.properties import (
    absolute_humidity,
    degree_of_saturation,
    dew_point,
    enthalpy,
    humidity_from_dew_point,
    humidity_from_enthalpy,
    humidity_from_wet_bulb,
    relative_humidity,
    saturation_humidity,
    solve_wet_bulb,
    specific_volume,
    temperature_from_enthalpy,
    vapor_pressure_from_humidity,
)
from psychro.engine.saturation import (
    lowest_temperature,
    saturation_pressure,
    saturation_temperature,
)
from psychro.errors import AmbiguousPairError, ConvergenceWarning, InvalidInputError
from psychro.models.constants import (
    ConstantsLike,
    PsychrometricConstants,
    effective_pressure,
    resolve_constants,
)
from psychro.models.state_point import AirState

logger = logging.getLogger(__name__)

# Relative tolerance above saturation before a state counts as fog
_SATURATION_SLACK = 1e-9


def _calc_all_from_tdb_w(
    Tdb: float,
    W: float,
    pressure: float,
    constants: PsychrometricConstants,
    notes: Optional[list[str]] = None,
) -> dict:
    """
    Given Tdb and W (humidity ratio), calculate all other properties.
    This is our canonical resolution path: every input pair is converted
    to Tdb + W before we get here.
    """
    c = constants
    state_warnings = list(notes or [])

    if W < 0:
        raise InvalidInputError(f"Humidity ratio must be >= 0, got {W:.6f}")
    T_low = lowest_temperature(c)
    if not Tdb > T_low:
        raise InvalidInputError(
            f"Dry-bulb temperature {Tdb:.2f} °C is outside the supported range "
            f"(must be above {T_low:.2f} °C)"
        )

    Ps = saturation_pressure(Tdb, c)
    Pv = vapor_pressure_from_humidity(W, pressure, c)
    W_sat = saturation_humidity(Tdb, pressure, c)

    if W > W_sat * (1.0 + _SATURATION_SLACK):
        # Supersaturated (fog): report the state at saturation temperatures
        state_warnings.append(
            f"Humidity ratio {W:.6f} exceeds saturation ({W_sat:.6f}) at "
            f"Tdb={Tdb:.2f} °C (fog region). RH, Twb and Tdp are clamped."
        )
        logger.debug("Fog state at Tdb=%.3f W=%.6f", Tdb, W)
        RH = 100.0
        Twb = Tdb
        Tdp = Tdb
    else:
        RH = relative_humidity(Tdb, W, pressure, c)
        Twb, converged = solve_wet_bulb(Tdb, W, pressure, c)
        if not converged:
            message = (
                f"Wet-bulb iteration did not converge at Tdb={Tdb:.2f} °C, "
                f"W={W:.6f}; using last iterate {Twb:.3f} °C."
            )
            logger.warning(message)
            warnings.warn(message, ConvergenceWarning, stacklevel=3)
            state_warnings.append(message)
        Twb = min(Twb, Tdb)
        Tdp = min(dew_point(W, pressure, c), Tdb)

    return {
        "pressure": pressure,
        "Tdb": Tdb,
        "Twb": Twb,
        "Tdp": Tdp,
        "RH": RH,
        "W": W,
        "h": enthalpy(Tdb, W, c),
        "v": specific_volume(Tdb, W, pressure, c),
        "Pv": Pv,
        "Ps": Ps,
        "mu": degree_of_saturation(Tdb, W, pressure, c),
        "warnings": state_warnings,
    }


def _bisect_dry_bulb(
    objective: Callable[[float], float],
    Tdb_min: float,
    Tdb_max: float,
    constants: PsychrometricConstants,
    description: str,
) -> tuple[float, list[str]]:
    """
    Find the dry-bulb temperature where ``objective`` changes sign.

    Returns the root and any notes to attach to the resolved state.
    """
    f_min = objective(Tdb_min)
    f_max = objective(Tdb_max)
    if f_min == 0.0:
        return Tdb_min, []
    if f_max == 0.0:
        return Tdb_max, []

    try:
        Tdb, info = bisect(
            objective,
            Tdb_min,
            Tdb_max,
            xtol=constants.bisection_tolerance,
            maxiter=constants.bisection_iterations,
            full_output=True,
            disp=False,
        )
    except ValueError:
        raise InvalidInputError(
            f"No dry-bulb temperature in [{Tdb_min:.1f}, {Tdb_max:.1f}] °C "
            f"satisfies {description}"
        )

    if not info.converged:
        message = (
            f"Dry-bulb search for {description} stopped after "
            f"{info.iterations} iterations at {Tdb:.4f} °C."
        )
        logger.warning(message)
        return Tdb, [message]

    logger.debug("Resolved %s in %d iterations: Tdb=%.6f", description, info.iterations, Tdb)
    return Tdb, []


def _wet_bulb_window(
    Twb: float, pressure: float, c: PsychrometricConstants
) -> tuple[float, float]:
    """Dry-bulb range for a known wet bulb, capped where the air becomes bone dry."""
    dry_limit = Twb + saturation_pressure(Twb, c) / (c.wet_bulb_coefficient * pressure)
    return Twb, min(Twb + WET_BULB_SEARCH_SPAN, dry_limit)


def _rh_upper_bound(RH_pct: float, pressure: float, c: PsychrometricConstants) -> float:
    """Highest dry-bulb at which RH_pct still leaves the vapor pressure below P."""
    if RH_pct <= 0:
        return SEARCH_TDB_MAX
    ps_limit = 0.99 * pressure * 100.0 / RH_pct
    if ps_limit >= saturation_pressure(SEARCH_TDB_MAX, c):
        return SEARCH_TDB_MAX
    return saturation_temperature(ps_limit, c)


# ---------------------------------------------------------------------------
# Direct resolvers
# ---------------------------------------------------------------------------

def _resolve_tdb_rh(Tdb: float, RH_pct: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from dry-bulb temperature and relative humidity."""
    W = absolute_humidity(Tdb, RH_pct, pressure, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


def _resolve_tdb_twb(Tdb: float, Twb: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from dry-bulb and wet-bulb temperatures."""
    if Twb > Tdb:
        raise InvalidInputError(
            f"Wet-bulb temperature ({Twb}) cannot exceed dry-bulb ({Tdb})"
        )
    W = humidity_from_wet_bulb(Tdb, Twb, pressure, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


def _resolve_tdb_tdp(Tdb: float, Tdp: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from dry-bulb and dew point temperatures."""
    if Tdp > Tdb:
        raise InvalidInputError(
            f"Dew point temperature ({Tdp}) cannot exceed dry-bulb ({Tdb})"
        )
    W = humidity_from_dew_point(Tdp, pressure, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


def _resolve_tdb_w(Tdb: float, W: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from dry-bulb temperature and humidity ratio (kg/kg)."""
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


def _resolve_tdb_h(Tdb: float, h: float, pressure: float, c: PsychrometricConstants) -> dict:
    """
    Resolve from dry-bulb temperature and specific enthalpy.

    The enthalpy equation is linear in W, so this is solved directly:
        W = (h - cp_a·Tdb) / (L0 + cp_v·Tdb)
    """
    W = humidity_from_enthalpy(Tdb, h, c)
    if W < 0:
        raise InvalidInputError(
            f"Enthalpy {h} kJ/kg is below the dry-air enthalpy at Tdb={Tdb} °C"
        )
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


def _resolve_w_h(W: float, h: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from humidity ratio and enthalpy (algebraic)."""
    Tdb = temperature_from_enthalpy(h, W, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


def _resolve_h_tdp(h: float, Tdp: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from enthalpy and dew point; the dew point fixes W."""
    W = humidity_from_dew_point(Tdp, pressure, c)
    Tdb = temperature_from_enthalpy(h, W, c)
    if Tdb < Tdp:
        raise InvalidInputError(
            f"Dew point temperature ({Tdp}) cannot exceed dry-bulb ({Tdb:.2f}) "
            f"implied by h={h} kJ/kg"
        )
    return _calc_all_from_tdb_w(Tdb, W, pressure, c)


# ---------------------------------------------------------------------------
# Search resolvers (bisection on Tdb)
# ---------------------------------------------------------------------------

def _resolve_rh_w(RH_pct: float, W: float, pressure: float, c: PsychrometricConstants) -> dict:
    """
    Resolve from relative humidity and humidity ratio.

    At fixed W the vapor pressure is fixed, so RH falls monotonically as Tdb
    rises and there is a single crossing in the search window.
    """
    if RH_pct == 0:
        raise AmbiguousPairError(
            "RH = 0% with a humidity ratio cannot determine the dry-bulb temperature"
        )

    def objective(Tdb: float) -> float:
        return relative_humidity(Tdb, W, pressure, c, clamp=False) - RH_pct

    Tdb, notes = _bisect_dry_bulb(
        objective, SEARCH_TDB_MIN, SEARCH_TDB_MAX, c, f"RH={RH_pct}%, W={W}"
    )
    return _calc_all_from_tdb_w(Tdb, W, pressure, c, notes)


def _resolve_rh_h(RH_pct: float, h: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from relative humidity and enthalpy; h rises with Tdb along an RH line."""

    def objective(Tdb: float) -> float:
        W = absolute_humidity(Tdb, RH_pct, pressure, c)
        return enthalpy(Tdb, W, c) - h

    Tdb, notes = _bisect_dry_bulb(
        objective,
        SEARCH_TDB_MIN,
        _rh_upper_bound(RH_pct, pressure, c),
        c,
        f"RH={RH_pct}%, h={h}",
    )
    W = absolute_humidity(Tdb, RH_pct, pressure, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c, notes)


def _resolve_rh_tdp(RH_pct: float, Tdp: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from relative humidity and dew point; the dew point fixes W."""
    if RH_pct == 0:
        raise AmbiguousPairError(
            "RH = 0% with a dew point cannot determine the dry-bulb temperature"
        )
    return _resolve_rh_w(RH_pct, humidity_from_dew_point(Tdp, pressure, c), pressure, c)


def _resolve_twb_rh(Twb: float, RH_pct: float, pressure: float, c: PsychrometricConstants) -> dict:
    """
    Resolve from wet-bulb temperature and relative humidity.

    At Tdb == Twb the air is saturated (RH = 100%); as Tdb increases along the
    wet-bulb line, RH decreases until the air is bone dry.
    """
    Tdb_min, Tdb_max = _wet_bulb_window(Twb, pressure, c)

    def objective(Tdb: float) -> float:
        W = humidity_from_wet_bulb(Tdb, Twb, pressure, c)
        return relative_humidity(Tdb, W, pressure, c, clamp=False) - RH_pct

    Tdb, notes = _bisect_dry_bulb(
        objective, Tdb_min, Tdb_max, c, f"Twb={Twb}, RH={RH_pct}%"
    )
    W = humidity_from_wet_bulb(Tdb, Twb, pressure, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c, notes)


def _resolve_twb_w(Twb: float, W: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from wet-bulb temperature and humidity ratio."""
    Tdb_min, Tdb_max = _wet_bulb_window(Twb, pressure, c)

    def objective(Tdb: float) -> float:
        return humidity_from_wet_bulb(Tdb, Twb, pressure, c) - W

    Tdb, notes = _bisect_dry_bulb(
        objective, Tdb_min, Tdb_max, c, f"Twb={Twb}, W={W}"
    )
    return _calc_all_from_tdb_w(Tdb, W, pressure, c, notes)


def _resolve_twb_h(Twb: float, h: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from wet-bulb temperature and enthalpy."""
    Tdb_min, Tdb_max = _wet_bulb_window(Twb, pressure, c)

    def objective(Tdb: float) -> float:
        W = humidity_from_wet_bulb(Tdb, Twb, pressure, c)
        return enthalpy(Tdb, W, c) - h

    Tdb, notes = _bisect_dry_bulb(
        objective, Tdb_min, Tdb_max, c, f"Twb={Twb}, h={h}"
    )
    W = humidity_from_wet_bulb(Tdb, Twb, pressure, c)
    return _calc_all_from_tdb_w(Tdb, W, pressure, c, notes)


def _resolve_twb_tdp(Twb: float, Tdp: float, pressure: float, c: PsychrometricConstants) -> dict:
    """Resolve from wet-bulb and dew point temperatures; the dew point fixes W."""
    return _resolve_twb_w(Twb, humidity_from_dew_point(Tdp, pressure, c), pressure, c)


def _resolve_tdp_w(Tdp: float, W: float, pressure: float, c: PsychrometricConstants) -> dict:
    """
    Dew point and humidity ratio both fix only the vapor pressure, so the
    dry-bulb temperature stays undetermined.
    """
    derived_W = humidity_from_dew_point(Tdp, pressure, c)
    if abs(derived_W - W) > DEW_POINT_W_TOLERANCE:
        raise AmbiguousPairError(
            f"Dew point {Tdp} °C and humidity ratio {W} are inconsistent "
            f"(the dew point implies W={derived_W:.6f})"
        )
    raise AmbiguousPairError(
        "Dew point and humidity ratio cannot determine the dry-bulb temperature"
    )


# Resolver dispatch table
_RESOLVERS = {
    ("Tdb", "RH"): _resolve_tdb_rh,
    ("Tdb", "Twb"): _resolve_tdb_twb,
    ("Tdb", "Tdp"): _resolve_tdb_tdp,
    ("Tdb", "W"): _resolve_tdb_w,
    ("Tdb", "h"): _resolve_tdb_h,
    ("Twb", "RH"): _resolve_twb_rh,
    ("Twb", "W"): _resolve_twb_w,
    ("Twb", "h"): _resolve_twb_h,
    ("Twb", "Tdp"): _resolve_twb_tdp,
    ("RH", "W"): _resolve_rh_w,
    ("RH", "h"): _resolve_rh_h,
    ("RH", "Tdp"): _resolve_rh_tdp,
    ("W", "h"): _resolve_w_h,
    ("h", "Tdp"): _resolve_h_tdp,
    ("Tdp", "W"): _resolve_tdp_w,
}


_TEMPERATURE_KINDS = (PropertyKind.TDB, PropertyKind.TWB, PropertyKind.TDP)


def _validate_value(kind: str, value: float, c: PsychrometricConstants) -> None:
    if not math.isfinite(value):
        raise InvalidInputError(f"{kind} must be a finite number, got {value}")
    if kind in _TEMPERATURE_KINDS and value <= lowest_temperature(c):
        raise InvalidInputError(
            f"{kind} must be above {lowest_temperature(c):.2f} °C, got {value}"
        )
    if kind == PropertyKind.RH and not 0.0 <= value <= 100.0:
        raise InvalidInputError(f"RH must be between 0 and 100%, got {value}")
    if kind == PropertyKind.W and value < 0:
        raise InvalidInputError(f"Humidity ratio must be >= 0, got {value}")


def resolve_state_point(
    input_pair: tuple[str, str],
    values: tuple[float, float],
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
    **metadata: Any,
) -> AirState:
    """
    Main entry point. Resolves a full state point from any supported input pair.

    Args:
        input_pair: Tuple of two property names, e.g. ("Tdb", "RH")
        values: Tuple of two values corresponding to the input pair
        pressure: Total pressure in kPa (standard pressure when None)
        constants: Partial or complete constants override
        **metadata: Identity fields for the AirState (name, season, airflow, ...)

    Returns:
        AirState with all resolved properties

    Raises:
        InvalidInputError: unsupported pair, identical kinds, or out-of-range values
        AmbiguousPairError: the pair cannot fix the dry-bulb temperature
    """
    c = resolve_constants(constants)
    P = effective_pressure(pressure, c)

    pair = tuple(str(getattr(k, "value", k)) for k in input_pair)
    vals = tuple(float(v) for v in values)
    if len(pair) != 2 or len(vals) != 2:
        raise InvalidInputError("Exactly two properties and two values are required")
    if pair[0] == pair[1]:
        raise InvalidInputError(
            f"Input pair must name two different properties, got {pair}"
        )

    for kind, value in zip(pair, vals):
        _validate_value(kind, value, c)

    # Check if pair is supported (or its reverse)
    if pair not in _RESOLVERS:
        reverse_pair = (pair[1], pair[0])
        if reverse_pair in _RESOLVERS:
            pair = reverse_pair
            vals = (vals[1], vals[0])
        else:
            supported = [f"({a}, {b})" for a, b in SUPPORTED_INPUT_PAIRS]
            raise InvalidInputError(
                f"Unsupported input pair: {tuple(input_pair)}. "
                f"Supported pairs: {', '.join(supported)}"
            )

    resolver = _RESOLVERS[pair]
    props = resolver(vals[0], vals[1], P, c)

    return AirState(
        input_pair=pair,
        input_values=vals,
        **props,
        **metadata,
    )


def recompute_state_point(
    state: AirState,
    input_pair: tuple[str, str],
    values: tuple[float, float],
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> AirState:
    """Re-resolve ``state`` from a new input pair, keeping its identity fields."""
    resolved = resolve_state_point(input_pair, values, pressure=pressure, constants=constants)
    return state.assign_properties(resolved)


def pressure_from_altitude(altitude: float) -> float:
    """
    Convert altitude (m) to standard-atmosphere pressure (kPa) using
    psychrolib's standard atmosphere model.
    """
    if not math.isfinite(altitude):
        raise InvalidInputError(f"Altitude must be finite, got {altitude}")
    psychrolib.SetUnitSystem(psychrolib.SI)
    return psychrolib.GetStandardAtmPressure(altitude) / 1000.0
