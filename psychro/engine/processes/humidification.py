"""
Humidification process solvers.

Water added per kg of dry air:  Δx = (capacity / 3600) / ṁ   [capacity in kg/h]

Enthalpy change by humidifier type:
  - Water spray:  Δh = cp_water · T_water · Δx   (nearly isenthalpic)
  - Steam:        Δh = (L0 + cp_vapor · T_steam) · Δx   (nearly isothermal)
  - Evaporative:  Δh = 0; the air moves toward saturation at its wet bulb,
                  reaching ``efficiency`` percent of the way.
"""

from typing import Optional

from psychro.engine.processes.base import ProcessSolver
from psychro.engine.processes.utils import (
    build_output,
    process_mass_flow,
    require,
    state_from_h_w,
    state_from_tdb_w,
)
from psychro.engine.properties import absolute_humidity
from psychro.engine.state_resolver import resolve_state_point
from psychro.errors import InvalidInputError
from psychro.models.constants import (
    ConstantsLike,
    PsychrometricConstants,
    effective_pressure,
    resolve_constants,
)
from psychro.models.process import (
    HumidifierType,
    HumidifyingMode,
    HumidifyingParams,
    ProcessOutput,
    ProcessType,
)
from psychro.models.state_point import AirState


class HumidificationSolver(ProcessSolver):
    """Solver for water-spray, steam and evaporative humidifiers."""

    process_type = ProcessType.HUMIDIFYING
    params_model = HumidifyingParams

    def solve(
        self,
        inlet: AirState,
        params: HumidifyingParams,
        pressure: float,
        constants: PsychrometricConstants,
    ) -> ProcessOutput:
        c = constants
        mode = params.mode
        warnings: list[str] = []
        mass_flow = process_mass_flow(params.airflow, inlet, pressure, c)
        metadata: dict = {"mode": mode.value, "airflow": params.airflow}

        if mode == HumidifyingMode.EVAPORATIVE:
            saturated = resolve_state_point(("Tdb", "RH"), (inlet.Twb, 100.0), pressure=pressure, constants=c)
            W_out = inlet.W + params.efficiency / 100.0 * (saturated.W - inlet.W)
            outlet = state_from_h_w(inlet.h, W_out, pressure, c)
            metadata["efficiency"] = params.efficiency
            metadata["water_added"] = mass_flow * 3600.0 * (W_out - inlet.W)
        else:
            capacity = require(params.capacity, "capacity", mode.value)
            dx = (capacity / 3600.0) / mass_flow

            if mode == HumidifyingMode.WATER_SPRAY:
                dh = c.cp_water * params.water_temp * dx
                metadata["water_temp"] = params.water_temp
            elif mode == HumidifyingMode.STEAM:
                dh = (c.latent_heat_0c + c.cp_vapor * params.steam_temp) * dx
                metadata["steam_temp"] = params.steam_temp
            else:
                raise ValueError(f"Unknown humidifying mode: {mode}")

            outlet = state_from_h_w(inlet.h + dh, inlet.W + dx, pressure, c)
            metadata["capacity"] = capacity
            metadata["water_added"] = capacity

        if outlet.W <= inlet.W:
            warnings.append("Humidifier adds no moisture to the air stream.")

        return build_output(
            self.process_type,
            inlet,
            outlet,
            mass_flow,
            c,
            metadata=metadata,
            warnings=warnings,
        )


def required_humidifier_capacity(
    inlet: AirState,
    target_RH: float,
    airflow: float,
    humidifier: HumidifierType = HumidifierType.WATER,
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> tuple[float, AirState]:
    """
    Water (kg/h) needed to bring the inlet to ``target_RH`` at the inlet dry-bulb.

    Returns (capacity, outlet). Water spray keeps the enthalpy, steam keeps the
    dry-bulb temperature.
    """
    c = resolve_constants(constants)
    P = effective_pressure(inlet.pressure if pressure is None else pressure, c)

    if not 0.0 < target_RH <= 100.0:
        raise InvalidInputError(f"target_RH must be in (0, 100], got {target_RH}")
    if airflow is None or airflow <= 0:
        raise InvalidInputError(f"airflow must be positive, got {airflow}")

    target_W = absolute_humidity(inlet.Tdb, target_RH, P, c)
    if target_W <= inlet.W:
        raise InvalidInputError(
            f"Target RH {target_RH}% is not above the inlet humidity; no humidification needed"
        )

    if humidifier == HumidifierType.WATER:
        outlet = state_from_h_w(inlet.h, target_W, P, c)
    else:
        outlet = state_from_tdb_w(inlet.Tdb, target_W, P, c)

    mass_flow = process_mass_flow(airflow, inlet, P, c)
    return mass_flow * 3600.0 * (target_W - inlet.W), outlet
