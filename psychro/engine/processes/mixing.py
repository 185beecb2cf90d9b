"""
Adiabatic mixing process solver.

Models the mixing of two or more airstreams in a mixing box with no external
heat transfer. The mixed state lies on the straight line between the entering
states in (h, W) space, positioned by the dry-air mass flows (lever rule).

Conservation equations (dry-air mass basis):
    W_mix = Σ ṁ_i · W_i / Σ ṁ_i
    h_mix = Σ ṁ_i · h_i / Σ ṁ_i

Each stream's mass flow comes from its own specific volume. In ratio mode the
inlet stream's dry-air mass fraction is given directly.

``mix_with_heat_exchange`` first passes the outdoor share through a total heat
exchanger and then mixes it with the return air.
"""

from typing import Optional, Union

import numpy as np

from psychro.engine.airflow import mass_flow_from_airflow
from psychro.engine.processes.base import ProcessSolver
from psychro.engine.processes.heat_exchange import HeatExchangeSolver
from psychro.engine.processes.utils import build_output, process_mass_flow, state_from_h_w
from psychro.errors import InvalidInputError
from psychro.models.constants import (
    ConstantsLike,
    PsychrometricConstants,
    effective_pressure,
    resolve_constants,
)
from psychro.models.process import (
    HeatExchangeMode,
    HeatExchangeParams,
    MixingParams,
    ProcessOutput,
    ProcessResult,
    ProcessType,
)
from psychro.models.state_point import AirState


class MixingSolver(ProcessSolver):
    """Solver for adiabatic mixing of the inlet with one or more streams."""

    process_type = ProcessType.MIXING
    params_model = MixingParams

    def solve(
        self,
        inlet: AirState,
        params: MixingParams,
        pressure: float,
        constants: PsychrometricConstants,
    ) -> ProcessOutput:
        if not params.streams:
            raise InvalidInputError("At least one stream to mix with is required")

        warnings: list[str] = []
        inlet_mass = process_mass_flow(params.airflow, inlet, pressure, constants)

        if params.ratio is not None:
            if len(params.streams) != 1:
                raise InvalidInputError(
                    f"Mixing by ratio takes exactly one other stream, got {len(params.streams)}"
                )
            f = params.ratio
            other = params.streams[0].state
            if f in (0.0, 1.0):
                label = "the inlet stream" if f == 1.0 else "the other stream"
                warnings.append(
                    f"Mixing ratio is {f}; the mixed state equals {label} "
                    f"(no actual mixing occurs)."
                )
            mixed = mix_states(inlet, other, f, pressure, constants)
            mass_out = inlet_mass
            metadata: dict = {"ratio": f}
        else:
            states = [inlet] + [s.state for s in params.streams]
            airflows = [params.airflow] + [s.airflow for s in params.streams]
            if any(a is None for a in airflows):
                raise InvalidInputError("Every mixed stream needs a positive airflow")

            masses = np.array([
                mass_flow_from_airflow(a, s, pressure, constants)
                for s, a in zip(states, airflows)
            ])
            mass_out = float(masses.sum())
            if mass_out <= 0:
                raise InvalidInputError("Total mixed mass flow is zero")

            W_mix = float(np.average([s.W for s in states], weights=masses))
            h_mix = float(np.average([s.h for s in states], weights=masses))
            mixed = state_from_h_w(h_mix, W_mix, pressure, constants)
            metadata = {
                "stream_mass_flows": masses.tolist(),
                "mass_in": mass_out,
                "mass_out": mass_out,
                "inlet_fraction": float(masses[0] / mass_out),
                "mixed_airflow": mass_out * mixed.v * 3600.0,
            }

        # No heat crosses the mixing box boundary
        result = ProcessResult(
            total_heat=0.0,
            sensible_heat=0.0,
            latent_heat=0.0,
            enthalpy_diff=mixed.h - inlet.h,
            humidity_diff=mixed.W - inlet.W,
            temperature_diff=mixed.Tdb - inlet.Tdb,
            mass_flow=mass_out,
        )

        return build_output(
            self.process_type,
            inlet,
            mixed,
            mass_out,
            constants,
            metadata=metadata,
            warnings=warnings,
            result=result,
        )


def required_mixing_ratio(
    first: AirState,
    second: AirState,
    target: Union[AirState, float],
) -> float:
    """
    Dry-air mass fraction of ``first`` that gives the target enthalpy.

        h_target = r · h_1 + (1 - r) · h_2  →  r = (h_target - h_2) / (h_1 - h_2)

    ``target`` is a state or an enthalpy (kJ/kg). The result is clipped to [0, 1].
    """
    h_target = target.h if isinstance(target, AirState) else float(target)
    dh = first.h - second.h
    if abs(dh) < 1e-12:
        raise InvalidInputError("Streams have equal enthalpy; any ratio gives the same mix")
    ratio = (h_target - second.h) / dh
    return min(max(ratio, 0.0), 1.0)


def mix_states(
    first: AirState,
    second: AirState,
    ratio: float,
    pressure: Optional[float] = None,
    constants: Optional[PsychrometricConstants] = None,
) -> AirState:
    """Mixed state for a dry-air mass fraction ``ratio`` of ``first``."""
    if not 0.0 <= ratio <= 1.0:
        raise InvalidInputError(f"Mixing ratio must be between 0 and 1, got {ratio}")
    P = first.pressure if pressure is None else pressure
    return state_from_h_w(
        ratio * first.h + (1.0 - ratio) * second.h,
        ratio * first.W + (1.0 - ratio) * second.W,
        P,
        constants,
    )


def mix_with_heat_exchange(
    outdoor: AirState,
    return_air: AirState,
    ratio: float,
    efficiency: float,
    exhaust: Optional[AirState] = None,
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> tuple[AirState, AirState]:
    """
    Mix outdoor air that has first passed a total heat exchanger with return air.

    ``ratio`` is the outdoor dry-air mass fraction. The exchanger carries that
    fraction on its supply side and the remainder on its exhaust side, so the
    efficiency is derated by min(r, 1 - r) / max(r, 1 - r). The exhaust side
    sees ``exhaust``, or the return air when it is not given.

    Returns (supply_air, mixed).
    """
    if not 0.0 <= ratio <= 1.0:
        raise InvalidInputError(f"Mixing ratio must be between 0 and 1, got {ratio}")
    if not 0.0 <= efficiency <= 100.0:
        raise InvalidInputError(f"Efficiency must be between 0 and 100%, got {efficiency}")

    c = resolve_constants(constants)
    P = effective_pressure(outdoor.pressure if pressure is None else pressure, c)

    if ratio == 0.0:
        # No outdoor air passes the exchanger
        supply = outdoor
    else:
        params = HeatExchangeParams(
            mode=HeatExchangeMode.TOTAL,
            exhaust=exhaust if exhaust is not None else return_air,
            airflow=ratio,
            exhaust_airflow=1.0 - ratio,
            efficiency=efficiency,
        )
        supply = HeatExchangeSolver().solve(outdoor, params, P, c).outlet

    return supply, mix_states(supply, return_air, ratio, P, c)
