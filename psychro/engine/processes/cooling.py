"""
Cooling and dehumidification process solver.

Capacities are entered as magnitudes and applied with the cooling sign, so a
20 kW coil removes 20 kW from the air (total_heat = -20).

Four modes:
  - CAPACITY_SHF: capacity + sensible heat factor → outlet state
  - CAPACITY_OUTLET_RH: capacity + outlet RH → outlet state. The air is first
    cooled sensibly until it reaches the RH target, then follows that RH line.
  - OUTLET_CONDITION: outlet Tdb + RH → required capacity
  - APPARATUS_DEW_POINT: ADP + bypass factor → outlet state. The outlet lies
    on the line from the inlet to the saturated ADP, BF of the way from the ADP.
"""

import logging

from psychro.engine.airflow import to_signed_capacity
from psychro.engine.processes.base import ProcessSolver
from psychro.engine.processes.utils import (
    build_output,
    process_mass_flow,
    require,
    state_from_h_w,
    state_from_tdb_w,
)
from psychro.engine.properties import cp_moist_air, humidity_from_enthalpy
from psychro.engine.state_resolver import resolve_state_point
from psychro.errors import InvalidInputError
from psychro.models.constants import PsychrometricConstants
from psychro.models.process import (
    CoolingMode,
    CoolingParams,
    OperationMode,
    ProcessOutput,
    ProcessType,
)
from psychro.models.state_point import AirState

logger = logging.getLogger(__name__)

# Passes of the cp_moist(x̄) fixed point in the SHF mode
SHF_PASSES = 5


class CoolingSolver(ProcessSolver):
    """Solver for cooling and dehumidification."""

    process_type = ProcessType.COOLING
    params_model = CoolingParams
    declared_mode = OperationMode.COOLING

    def solve(
        self,
        inlet: AirState,
        params: CoolingParams,
        pressure: float,
        constants: PsychrometricConstants,
    ) -> ProcessOutput:
        mode = params.mode
        warnings: list[str] = []
        mass_flow = process_mass_flow(params.airflow, inlet, pressure, constants)
        metadata: dict = {"mode": mode.value, "airflow": params.airflow}

        if mode == CoolingMode.CAPACITY_SHF:
            outlet = self._by_capacity_and_shf(inlet, params, mass_flow, pressure, constants)
        elif mode == CoolingMode.CAPACITY_OUTLET_RH:
            outlet = self._by_capacity_and_outlet_rh(inlet, params, mass_flow, pressure, constants)
        elif mode == CoolingMode.OUTLET_CONDITION:
            outlet = self._by_outlet_condition(inlet, params, pressure, constants, warnings)
        elif mode == CoolingMode.APPARATUS_DEW_POINT:
            outlet = self._by_apparatus_dew_point(
                inlet, params, pressure, constants, warnings, metadata
            )
        else:
            raise ValueError(f"Unknown cooling mode: {mode}")

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

    def _by_capacity_and_shf(self, inlet, params, mass_flow, pressure, c) -> AirState:
        """
        Split the signed capacity into sensible (SHF·Q) and total parts.

        ΔT depends on cp at the mean humidity ratio, which depends on the
        outlet W, so a few fixed-point passes settle both.
        """
        capacity = require(params.capacity, "capacity", params.mode.value)
        shf = require(params.shf, "shf", params.mode.value)

        total = to_signed_capacity(OperationMode.COOLING, capacity)
        sensible = shf * total
        h_out = inlet.h + total / mass_flow

        W_out = inlet.W
        Tdb_out = inlet.Tdb
        for _ in range(SHF_PASSES):
            cp = cp_moist_air(0.5 * (inlet.W + W_out), c)
            Tdb_out = inlet.Tdb + sensible / (mass_flow * cp)
            W_next = humidity_from_enthalpy(Tdb_out, h_out, c)
            converged = abs(W_next - W_out) < 1e-12
            W_out = W_next
            if converged:
                break

        if W_out < 0:
            raise InvalidInputError(
                f"Cooling capacity {capacity} kW with SHF {shf} would leave a negative "
                f"humidity ratio ({W_out:.6f}); reduce the latent share"
            )
        return state_from_tdb_w(Tdb_out, W_out, pressure, c)

    def _by_capacity_and_outlet_rh(self, inlet, params, mass_flow, pressure, c) -> AirState:
        capacity = require(params.capacity, "capacity", params.mode.value)
        outlet_RH = require(params.outlet_RH, "outlet_RH", params.mode.value)

        total_dh = capacity / mass_flow

        # Phase 1: sensible cooling at constant W until the RH target is met
        knee = inlet
        dh_to_rh = 0.0
        if outlet_RH > inlet.RH:
            knee = resolve_state_point(("RH", "W"), (outlet_RH, inlet.W), pressure=pressure, constants=c)
            dh_to_rh = max(0.0, inlet.h - knee.h)

        if total_dh <= dh_to_rh + 1e-6:
            return state_from_h_w(inlet.h - total_dh, inlet.W, pressure, c)

        # Phase 2: along the RH line
        h_target = knee.h - (total_dh - dh_to_rh)
        logger.debug("Cooling along RH=%.1f%% to h=%.3f", outlet_RH, h_target)
        return resolve_state_point(("RH", "h"), (outlet_RH, h_target), pressure=pressure, constants=c)

    def _by_outlet_condition(self, inlet, params, pressure, c, warnings) -> AirState:
        outlet_Tdb = require(params.outlet_Tdb, "outlet_Tdb", params.mode.value)
        outlet_RH = require(params.outlet_RH, "outlet_RH", params.mode.value)

        outlet = resolve_state_point(("Tdb", "RH"), (outlet_Tdb, outlet_RH), pressure=pressure, constants=c)
        if outlet.W > inlet.W:
            warnings.append(
                f"Outlet humidity ratio ({outlet.W:.6f}) is above the inlet "
                f"({inlet.W:.6f}); a cooling coil cannot add moisture."
            )
        return outlet

    def _by_apparatus_dew_point(self, inlet, params, pressure, c, warnings, metadata) -> AirState:
        adp_Tdb = require(params.adp_Tdb, "adp_Tdb", params.mode.value)
        BF = require(params.bypass_factor, "bypass_factor", params.mode.value)

        # Resolve ADP as a saturated state (100% RH)
        adp = resolve_state_point(("Tdb", "RH"), (adp_Tdb, 100.0), pressure=pressure, constants=c)

        if adp_Tdb >= inlet.Tdp:
            warnings.append(
                f"ADP Tdb ({adp_Tdb:.1f}) is at or above the inlet dew point "
                f"({inlet.Tdp:.1f}). No dehumidification would occur."
            )

        leaving_h = adp.h + BF * (inlet.h - adp.h)
        leaving_W = adp.W + BF * (inlet.W - adp.W)

        metadata["adp"] = adp.model_dump()
        metadata["bypass_factor"] = BF
        metadata["contact_factor"] = 1.0 - BF
        return state_from_h_w(leaving_h, leaving_W, pressure, c)
