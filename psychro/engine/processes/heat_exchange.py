"""
Air-to-air heat recovery (total heat exchanger) process solver.

The inlet state is the outdoor (supply-side) air, the exhaust state comes in
the parameters. The supply air moves toward the exhaust condition by the
effective efficiency:

    total mode:     h_sa = h_oa + ε (h_ea - h_oa),   W_sa = W_oa + ε (W_ea - W_oa)
    separate mode:  t_sa = t_oa + ε_s (t_ea - t_oa),  W_sa = W_oa + ε_l (W_ea - W_oa)

Unequal supply and exhaust flows derate the efficiency by min(flow) / max(flow),
each side's flow being the smaller of its entering and leaving airflows.
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
from psychro.errors import InvalidInputError
from psychro.models.constants import PsychrometricConstants
from psychro.models.process import (
    HeatExchangeMode,
    HeatExchangeParams,
    ProcessOutput,
    ProcessType,
)
from psychro.models.state_point import AirState


def effective_airflow(entering: Optional[float], leaving: Optional[float] = None) -> float:
    if entering is None or entering <= 0:
        return 0.0
    if leaving is None or leaving <= 0:
        return entering
    return min(entering, leaving)


def airflow_ratio(first: float, second: float) -> float:
    largest = max(first, second)
    if largest <= 0:
        return 0.0
    return min(first, second) / largest


class HeatExchangeSolver(ProcessSolver):
    """Solver for total / sensible-latent heat recovery on the supply side."""

    process_type = ProcessType.HEAT_EXCHANGE
    params_model = HeatExchangeParams

    def solve(
        self,
        inlet: AirState,
        params: HeatExchangeParams,
        pressure: float,
        constants: PsychrometricConstants,
    ) -> ProcessOutput:
        c = constants
        exhaust = params.exhaust
        warnings: list[str] = []

        supply_flow = effective_airflow(params.airflow, params.supply_airflow_out)
        exhaust_flow = effective_airflow(
            params.exhaust_airflow if params.exhaust_airflow is not None else params.airflow,
            params.exhaust_airflow_out,
        )
        ratio = airflow_ratio(supply_flow, exhaust_flow)
        if ratio < 1.0:
            warnings.append(
                f"Supply and exhaust airflows differ; efficiency derated by {ratio:.3f}."
            )

        metadata: dict = {
            "mode": params.mode.value,
            "supply_airflow": supply_flow,
            "exhaust_airflow": exhaust_flow,
            "airflow_ratio": ratio,
        }

        if params.mode == HeatExchangeMode.TOTAL:
            efficiency = require(params.efficiency, "efficiency", params.mode.value)
            eff = efficiency / 100.0 * ratio
            supply = state_from_h_w(
                inlet.h + eff * (exhaust.h - inlet.h),
                inlet.W + eff * (exhaust.W - inlet.W),
                pressure,
                c,
            )
            if params.both_sides:
                exhaust_out = state_from_h_w(
                    exhaust.h - eff * (exhaust.h - inlet.h),
                    exhaust.W - eff * (exhaust.W - inlet.W),
                    pressure,
                    c,
                )
                metadata["exhaust_outlet"] = exhaust_out.model_dump()
            metadata["effective_efficiency"] = eff * 100.0

        elif params.mode == HeatExchangeMode.SEPARATE:
            sensible_eff = require(params.sensible_efficiency, "sensible_efficiency", params.mode.value)
            latent_eff = require(params.latent_efficiency, "latent_efficiency", params.mode.value)
            eff_s = sensible_eff / 100.0 * ratio
            eff_l = latent_eff / 100.0 * ratio
            supply = state_from_tdb_w(
                inlet.Tdb + eff_s * (exhaust.Tdb - inlet.Tdb),
                inlet.W + eff_l * (exhaust.W - inlet.W),
                pressure,
                c,
            )
            if params.both_sides:
                exhaust_out = state_from_tdb_w(
                    exhaust.Tdb - eff_s * (exhaust.Tdb - inlet.Tdb),
                    exhaust.W - eff_l * (exhaust.W - inlet.W),
                    pressure,
                    c,
                )
                metadata["exhaust_outlet"] = exhaust_out.model_dump()
            metadata["effective_sensible_efficiency"] = eff_s * 100.0
            metadata["effective_latent_efficiency"] = eff_l * 100.0
        else:
            raise ValueError(f"Unknown heat exchange mode: {params.mode}")

        mass_flow = process_mass_flow(supply_flow, inlet, pressure, c)
        return build_output(
            self.process_type,
            inlet,
            supply,
            mass_flow,
            c,
            metadata=metadata,
            warnings=warnings,
        )


def required_exchange_efficiency(
    outdoor: AirState, exhaust: AirState, target: AirState
) -> float:
    """Total heat efficiency (%) that brings the outdoor air to the target enthalpy."""
    dh = exhaust.h - outdoor.h
    if abs(dh) < 1e-12:
        raise InvalidInputError("Outdoor and exhaust air have equal enthalpy")
    efficiency = (target.h - outdoor.h) / dh * 100.0
    return min(max(efficiency, 0.0), 100.0)
