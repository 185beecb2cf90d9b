"""
Sensible heating process solver.

Heating is a horizontal line on the psychrometric chart: the humidity ratio
stays constant while the dry-bulb temperature rises.

Two input modes:
  - CAPACITY: heating capacity (kW) and airflow → h_out = h_in + Q / ṁ
  - TEMPERATURE: outlet dry-bulb and airflow → required capacity
"""

from psychro.engine.airflow import to_signed_capacity
from psychro.engine.processes.base import ProcessSolver
from psychro.engine.processes.utils import (
    build_output,
    process_mass_flow,
    require,
    state_from_h_w,
    state_from_tdb_w,
)
from psychro.models.constants import PsychrometricConstants
from psychro.models.process import (
    HeatingMode,
    HeatingParams,
    OperationMode,
    ProcessOutput,
    ProcessType,
)
from psychro.models.state_point import AirState


class HeatingSolver(ProcessSolver):
    """Solver for sensible heating."""

    process_type = ProcessType.HEATING
    params_model = HeatingParams
    declared_mode = OperationMode.HEATING

    def solve(
        self,
        inlet: AirState,
        params: HeatingParams,
        pressure: float,
        constants: PsychrometricConstants,
    ) -> ProcessOutput:
        mode = params.mode
        warnings: list[str] = []
        mass_flow = process_mass_flow(params.airflow, inlet, pressure, constants)

        if mode == HeatingMode.CAPACITY:
            capacity = require(params.capacity, "capacity", mode.value)
            total = to_signed_capacity(OperationMode.HEATING, capacity)
            outlet = state_from_h_w(inlet.h + total / mass_flow, inlet.W, pressure, constants)

        elif mode == HeatingMode.TEMPERATURE:
            outlet_Tdb = require(params.outlet_Tdb, "outlet_Tdb", mode.value)
            if outlet_Tdb < inlet.Tdp:
                warnings.append(
                    f"Outlet Tdb ({outlet_Tdb:.1f}) is below the inlet dew point "
                    f"({inlet.Tdp:.1f}). In practice, dehumidification would occur."
                )
            outlet = state_from_tdb_w(outlet_Tdb, inlet.W, pressure, constants)
        else:
            raise ValueError(f"Unknown heating mode: {mode}")

        metadata = {
            "mode": mode.value,
            "airflow": params.airflow,
        }
        if params.capacity is not None:
            metadata["capacity"] = params.capacity

        return build_output(
            self.process_type,
            inlet,
            outlet,
            mass_flow,
            constants,
            declared_mode=self.declared_mode,
            metadata=metadata,
            warnings=warnings,
        )
