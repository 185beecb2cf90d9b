"""
Shared utility functions for psychrometric process solvers.

These functions are used by every solver and by the coil analysis, and are
extracted here to avoid duplication.
"""

import logging
from typing import Optional

import numpy as np
from scipy.optimize import brentq

from psychro.config import HEAT_EPSILON, PATH_SEGMENTS, SEARCH_TDB_MIN
from psychro.engine.airflow import (
    calculate_shf,
    infer_mode_from_signed,
    mass_flow_from_airflow,
    split_capacity,
)
from psychro.engine.properties import saturation_humidity
from psychro.engine.state_resolver import resolve_state_point
from psychro.errors import InvalidInputError
from psychro.models.constants import PsychrometricConstants
from psychro.models.process import (
    OperationMode,
    PathPoint,
    ProcessOutput,
    ProcessResult,
    ProcessType,
)
from psychro.models.state_point import AirState

logger = logging.getLogger(__name__)


def require(value, name: str, mode: str):
    """Return ``value`` or raise if a mode-specific parameter is missing."""
    if value is None:
        raise InvalidInputError(f"{name} is required for {mode} mode")
    return value


def process_mass_flow(
    airflow: Optional[float],
    inlet: AirState,
    pressure: float,
    constants: PsychrometricConstants,
) -> float:
    """Dry-air mass flow (kg/s) through a process; the airflow must give a real flow."""
    mass_flow = mass_flow_from_airflow(airflow, inlet, pressure, constants)
    if not mass_flow > 0:
        raise InvalidInputError(f"airflow must be a positive finite value, got {airflow}")
    return mass_flow


def state_from_tdb_w(
    Tdb: float, W: float, pressure: float, constants: PsychrometricConstants
) -> AirState:
    return resolve_state_point(("Tdb", "W"), (Tdb, W), pressure=pressure, constants=constants)


def state_from_h_w(
    h: float, W: float, pressure: float, constants: PsychrometricConstants
) -> AirState:
    return resolve_state_point(("W", "h"), (W, h), pressure=pressure, constants=constants)


def process_result(
    inlet: AirState,
    outlet: AirState,
    mass_flow: float,
    constants: PsychrometricConstants,
) -> ProcessResult:
    """Energy breakdown (outlet minus inlet) with sensible + latent == total."""
    split = split_capacity(mass_flow, inlet, outlet, constants)
    return ProcessResult(
        total_heat=split.total,
        sensible_heat=split.sensible,
        latent_heat=split.latent,
        enthalpy_diff=split.enthalpy_diff,
        humidity_diff=outlet.W - inlet.W,
        temperature_diff=outlet.Tdb - inlet.Tdb,
        mass_flow=mass_flow,
        shf=calculate_shf(split.sensible, split.total),
    )


def check_plausibility(
    declared_mode: Optional[OperationMode], total_heat: float
) -> tuple[Optional[OperationMode], bool, Optional[str]]:
    """
    Compare the declared heating/cooling mode with the sign of the total heat.

    Returns (inferred_mode, plausible, warning).
    """
    inferred = infer_mode_from_signed(total_heat)
    if declared_mode is None or inferred is None or abs(total_heat) <= HEAT_EPSILON:
        return inferred, True, None
    if inferred != declared_mode:
        return inferred, False, (
            f"Process is declared as {declared_mode.value} but the computed total heat "
            f"({total_heat:.3f} kW) indicates {inferred.value}."
        )
    return inferred, True, None


def build_output(
    process_type: ProcessType,
    inlet: AirState,
    outlet: AirState,
    mass_flow: float,
    constants: PsychrometricConstants,
    declared_mode: Optional[OperationMode] = None,
    metadata: Optional[dict] = None,
    warnings: Optional[list[str]] = None,
    result: Optional[ProcessResult] = None,
) -> ProcessOutput:
    """Assemble a ProcessOutput, attaching plausibility and outlet warnings."""
    warnings = list(warnings or [])
    if result is None:
        result = process_result(inlet, outlet, mass_flow, constants)

    inferred, plausible, note = check_plausibility(declared_mode, result.total_heat)
    if note:
        logger.warning("%s: %s", process_type.value, note)
        warnings.append(note)

    for message in outlet.warnings:
        if message not in warnings:
            warnings.append(message)

    return ProcessOutput(
        process_type=process_type,
        inlet=inlet,
        outlet=outlet,
        result=result,
        declared_mode=declared_mode,
        inferred_mode=inferred,
        plausible=plausible,
        path_points=generate_path_points(inlet.Tdb, inlet.W, outlet.Tdb, outlet.W),
        metadata=metadata or {},
        warnings=warnings,
    )


def find_adp(
    entering: AirState,
    leaving: AirState,
    pressure: float,
    constants: PsychrometricConstants,
) -> float:
    """
    Find the apparatus dew point (ADP): the intersection of the process line
    with the saturation curve.

    The process line in Tdb-W space is:
        W = entering_W + slope × (Tdb - entering_Tdb)

    The ADP is where W_sat(Tdb) == W_line(Tdb).

    Returns the ADP dry-bulb temperature.
    """
    if abs(leaving.Tdb - entering.Tdb) < 1e-10:
        raise InvalidInputError(
            "Entering and leaving Tdb are identical; cannot determine process line."
        )

    slope = (leaving.W - entering.W) / (leaving.Tdb - entering.Tdb)

    def objective(Tdb: float) -> float:
        W_on_line = entering.W + slope * (Tdb - entering.Tdb)
        return saturation_humidity(Tdb, pressure, constants) - W_on_line

    # The extended line can cut the saturation curve twice; the ADP is the
    # crossing closest to the leaving state, so bracket it from the highest
    # sampled temperature that lies above the curve.
    Tdb_max = leaving.Tdb
    samples = np.linspace(SEARCH_TDB_MIN, Tdb_max, 200)
    supersaturated = [t for t in samples if objective(t) < 0]

    if not supersaturated or objective(Tdb_max) < 0:
        raise InvalidInputError(
            "Process line does not intersect the saturation curve. "
            "Check entering and leaving conditions."
        )

    return brentq(objective, float(max(supersaturated)), Tdb_max, xtol=1e-8)


def generate_path_points(
    start_Tdb: float,
    start_W: float,
    end_Tdb: float,
    end_W: float,
    n_points: int = PATH_SEGMENTS,
) -> list[PathPoint]:
    """Generate intermediate points along a straight process line."""
    tdbs = np.linspace(start_Tdb, end_Tdb, n_points + 1)
    ws = np.linspace(start_W, end_W, n_points + 1)
    return [PathPoint(Tdb=float(t), W=float(w)) for t, w in zip(tdbs, ws)]
