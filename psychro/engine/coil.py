"""
Coil capacity analysis engine.

Computes the air-side duty of a coil from its entering and leaving states,
with optional water-side balance, condensate removal, a rough row count,
and (for cooling coils) the apparatus dew point and bypass factor of the
process line. Reuses the shared process helpers so coil loads and process
loads always agree.

Water side (ρ ≈ 1 kg/L):   Q_w = V̇_w [L/min] · cp_w · Δt_w / 60   [kW]
"""

import logging
import math
from typing import Optional

from psychro.engine.airflow import calculate_shf, mass_flow_from_airflow, split_capacity
from psychro.engine.processes.utils import find_adp
from psychro.engine.state_resolver import resolve_state_point
from psychro.errors import InvalidInputError
from psychro.models.coil import CoilCapacity, CoilInput, CoilResult
from psychro.models.constants import ConstantsLike, effective_pressure, resolve_constants
from psychro.models.state_point import AirState

logger = logging.getLogger(__name__)

# Heat flux handled per coil row (kW per m² of face area)
ROW_CAPACITY = 6.5
MAX_ROWS = 8


def coil_capacity(
    inlet: AirState,
    outlet: AirState,
    airflow: float,
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> CoilCapacity:
    """Air-side total, sensible and latent duty (kW, signed) between two states."""
    c = resolve_constants(constants)
    P = effective_pressure(inlet.pressure if pressure is None else pressure, c)
    mass_flow = mass_flow_from_airflow(airflow, inlet, P, c)
    split = split_capacity(mass_flow, inlet, outlet, c)
    return CoilCapacity(
        total_capacity=split.total,
        sensible_capacity=split.sensible,
        latent_capacity=split.latent,
        shf=calculate_shf(split.sensible, split.total),
        temperature_diff=outlet.Tdb - inlet.Tdb,
        humidity_diff=outlet.W - inlet.W,
        enthalpy_diff=split.enthalpy_diff,
        mass_flow=mass_flow,
    )


def water_side_capacity(
    water_flow: Optional[float],
    water_entering_temp: Optional[float],
    water_leaving_temp: Optional[float],
    constants: ConstantsLike = None,
) -> Optional[float]:
    """Heat picked up by the water (kW); None when the water data is incomplete."""
    if not water_flow or water_entering_temp is None or water_leaving_temp is None:
        return None
    c = resolve_constants(constants)
    return water_flow * c.cp_water * (water_leaving_temp - water_entering_temp) / 60.0


def heat_balance(water_side: float, air_side: float) -> float:
    """Heat balance error (%); water and air duties should cancel."""
    return abs((water_side + air_side) / max(abs(air_side), 1e-6)) * 100.0


def _with_water_side(
    capacity: CoilCapacity,
    water_flow: Optional[float],
    water_entering_temp: Optional[float],
    water_leaving_temp: Optional[float],
    constants,
) -> CoilResult:
    water = water_side_capacity(water_flow, water_entering_temp, water_leaving_temp, constants)
    return CoilResult(
        **capacity.model_dump(),
        water_side_capacity=water,
        heat_balance=None if water is None else heat_balance(water, capacity.total_capacity),
    )


def find_apparatus_dew_point(
    entering: AirState,
    leaving: AirState,
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> tuple[float, float]:
    """
    Reverse coil analysis: the ADP where the extended entering → leaving line
    meets the saturation curve, and the bypass factor it implies.

        BF = (t_leaving - t_adp) / (t_entering - t_adp)

    Returns (adp_Tdb, bypass_factor).
    """
    c = resolve_constants(constants)
    P = effective_pressure(entering.pressure if pressure is None else pressure, c)
    adp_Tdb = find_adp(entering, leaving, P, c)
    return adp_Tdb, (leaving.Tdb - adp_Tdb) / (entering.Tdb - adp_Tdb)


def cooling_coil(
    inlet: AirState,
    outlet: AirState,
    airflow: float,
    water_flow: Optional[float] = None,
    water_entering_temp: Optional[float] = None,
    water_leaving_temp: Optional[float] = None,
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> CoilResult:
    """Cooling coil duty, condensate removal, ADP/BF and optional water balance."""
    c = resolve_constants(constants)
    P = effective_pressure(inlet.pressure if pressure is None else pressure, c)

    capacity = coil_capacity(inlet, outlet, airflow, P, c)
    result = _with_water_side(capacity, water_flow, water_entering_temp, water_leaving_temp, c)

    # Condensate density taken as 1 kg/L
    result.condensate_removal = capacity.mass_flow * 3600.0 * max(0.0, -capacity.humidity_diff)

    if outlet.W < inlet.W and outlet.Tdb < inlet.Tdb:
        try:
            result.adp_Tdb, result.bypass_factor = find_apparatus_dew_point(inlet, outlet, P, c)
        except InvalidInputError as e:
            logger.info("No apparatus dew point for coil line: %s", e)
            result.warnings.append(str(e))
    else:
        result.warnings.append(
            "Leaving air is not both cooler and drier than entering air; "
            "no apparatus dew point is reported."
        )
    return result


def heating_coil(
    inlet: AirState,
    outlet: AirState,
    airflow: float,
    water_flow: Optional[float] = None,
    water_entering_temp: Optional[float] = None,
    water_leaving_temp: Optional[float] = None,
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> CoilResult:
    """Heating coil duty with optional water balance."""
    capacity = coil_capacity(inlet, outlet, airflow, pressure, constants)
    return _with_water_side(capacity, water_flow, water_entering_temp, water_leaving_temp, constants)


def required_water_flow(
    capacity: float,
    water_entering_temp: float,
    water_leaving_temp: float,
    constants: ConstantsLike = None,
) -> float:
    """Water flow (L/min) that carries ``capacity`` kW at the given temperature change."""
    c = resolve_constants(constants)
    delta_t = abs(water_entering_temp - water_leaving_temp)
    if delta_t < 1e-9:
        raise InvalidInputError("Water entering and leaving temperatures must differ")
    return abs(capacity) * 60.0 / (c.cp_water * delta_t)


def estimate_coil_rows(capacity: float, airflow: float, face_velocity: float = 2.5) -> int:
    """Rough row count (1-8) from the heat flux over the coil face."""
    if airflow <= 0 or face_velocity <= 0:
        raise InvalidInputError("airflow and face_velocity must be positive")
    face_area = (airflow / 3600.0) / face_velocity
    rows = math.ceil(abs(capacity) / face_area / ROW_CAPACITY)
    return max(1, min(rows, MAX_ROWS))


def analyze_coil(coil_input: CoilInput) -> CoilResult:
    """Main entry point: resolve both states and run the cooling or heating analysis."""
    ci = coil_input
    entering = resolve_state_point(
        ci.entering_pair, ci.entering_values, pressure=ci.pressure, constants=ci.constants,
        name="entering",
    )
    leaving = resolve_state_point(
        ci.leaving_pair, ci.leaving_values, pressure=ci.pressure, constants=ci.constants,
        name="leaving",
    )

    analyze = cooling_coil if ci.cooling else heating_coil
    result = analyze(
        entering,
        leaving,
        ci.airflow,
        water_flow=ci.water_flow,
        water_entering_temp=ci.water_entering_temp,
        water_leaving_temp=ci.water_leaving_temp,
        pressure=ci.pressure,
        constants=ci.constants,
    )
    result.estimated_rows = estimate_coil_rows(result.total_capacity, ci.airflow, ci.face_velocity)
    return result
