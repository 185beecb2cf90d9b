"""
Mass flow and capacity helpers shared by every process model.

Sign convention: heat added to the air is positive, heat removed is negative.
Capacities entered by a user are magnitudes; ``to_signed_capacity`` attaches
the sign implied by the operation mode.

    ṁ  = (V̇ / 3600) / v                  [kg_da/s from m³/h]
    Qt = ṁ · Δh
    Qs = ṁ · cp_moist(x̄) · ΔT
    Ql = Qt - Qs
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict

from psychro.config import HEAT_EPSILON
from psychro.engine.properties import cp_moist_air, specific_volume
from psychro.models.constants import DEFAULT_CONSTANTS, PsychrometricConstants
from psychro.models.process import OperationMode
from psychro.models.state_point import AirState


class CapacitySplit(BaseModel):
    """Heat flows in kW and the specific enthalpy change in kJ/kg."""

    model_config = ConfigDict(frozen=True)

    total: float
    sensible: float
    latent: float
    enthalpy_diff: float


def mass_flow_from_airflow(
    airflow: Optional[float],
    state: AirState,
    pressure: Optional[float] = None,
    constants: Optional[PsychrometricConstants] = None,
) -> float:
    """
    Dry-air mass flow (kg/s) for a volumetric airflow (m³/h) at ``state``.

    Returns 0 for a missing, non-finite or non-positive airflow.
    """
    if airflow is None or not math.isfinite(airflow) or airflow <= 0:
        return 0.0
    P = state.pressure if pressure is None else pressure
    v = specific_volume(state.Tdb, state.W, P, constants)
    return (airflow / 3600.0) / v


def split_capacity(
    mass_flow: float,
    inlet: AirState,
    outlet: AirState,
    constants: Optional[PsychrometricConstants] = None,
) -> CapacitySplit:
    """Total, sensible and latent heat (kW) for air going from inlet to outlet."""
    c = constants or DEFAULT_CONSTANTS
    dh = outlet.h - inlet.h
    mean_x = 0.5 * (inlet.W + outlet.W)
    total = mass_flow * dh
    sensible = mass_flow * cp_moist_air(mean_x, c) * (outlet.Tdb - inlet.Tdb)
    return CapacitySplit(
        total=total,
        sensible=sensible,
        latent=total - sensible,
        enthalpy_diff=dh,
    )


def calculate_shf(
    sensible: float, total: float, eps: float = HEAT_EPSILON
) -> Optional[float]:
    """Sensible heat factor |Qs| / |Qt| in [0, 1]; None when there is no total load."""
    if not math.isfinite(total) or abs(total) <= eps:
        return None
    shf = abs(sensible) / max(abs(total), eps)
    return min(max(shf, 0.0), 1.0)


def to_signed_capacity(mode: OperationMode, magnitude: float) -> float:
    """Attach the heating (+) / cooling (-) sign to a capacity magnitude."""
    value = abs(magnitude)
    return -value if mode == OperationMode.COOLING else value


def to_display_magnitude(value: float) -> float:
    return abs(value)


def infer_mode_from_signed(value: float, eps: float = HEAT_EPSILON) -> Optional[OperationMode]:
    """Operation mode implied by a signed heat flow; None when it is ~zero."""
    if not math.isfinite(value) or abs(value) <= eps:
        return None
    return OperationMode.HEATING if value > 0 else OperationMode.COOLING
