"""
Process dispatch.

Validates a parameter bundle against the process type's model, runs the
matching solver, and applies Process records to the state points of a system.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from psychro.engine.processes.base import ProcessSolver
from psychro.engine.processes.cooling import CoolingSolver
from psychro.engine.processes.heat_exchange import HeatExchangeSolver
from psychro.engine.processes.heating import HeatingSolver
from psychro.engine.processes.humidification import HumidificationSolver
from psychro.engine.processes.mixing import MixingSolver
from psychro.errors import InvalidInputError
from psychro.models.constants import ConstantsLike, effective_pressure, resolve_constants
from psychro.models.process import Process, ProcessOutput, ProcessType
from psychro.models.state_point import AirState

logger = logging.getLogger(__name__)

# Solver dispatch table: maps process types to solver instances
_SOLVERS: dict[ProcessType, ProcessSolver] = {
    ProcessType.HEATING: HeatingSolver(),
    ProcessType.COOLING: CoolingSolver(),
    ProcessType.HUMIDIFYING: HumidificationSolver(),
    ProcessType.MIXING: MixingSolver(),
    ProcessType.HEAT_EXCHANGE: HeatExchangeSolver(),
}


def get_solver(process_type: Union[ProcessType, str]) -> ProcessSolver:
    try:
        return _SOLVERS[ProcessType(process_type)]
    except (KeyError, ValueError):
        raise InvalidInputError(f"Unknown process type: {process_type}")


def apply_process(
    process_type: Union[ProcessType, str],
    inlet: AirState,
    parameters: Union[Mapping[str, Any], BaseModel],
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
) -> ProcessOutput:
    """
    Run one process on a resolved inlet state.

    ``pressure`` defaults to the inlet's own pressure.
    """
    solver = get_solver(process_type)
    c = resolve_constants(constants)
    P = effective_pressure(inlet.pressure if pressure is None else pressure, c)

    if isinstance(parameters, solver.params_model):
        params = parameters
    else:
        raw = parameters.model_dump() if isinstance(parameters, BaseModel) else dict(parameters)
        try:
            params = solver.params_model.model_validate(raw)
        except ValidationError as e:
            raise InvalidInputError(
                f"Invalid parameters for {solver.process_type.value}: {e}"
            ) from e

    logger.debug("Applying %s process to state %s", solver.process_type.value, inlet.id)
    return solver.solve(inlet, params, P, c)


def resolve_airflow(
    state: AirState, airflows: Optional[Mapping[str, float]] = None
) -> Optional[float]:
    """The state's own airflow, else its named design airflow, else None."""
    if state.airflow is not None and state.airflow > 0:
        return state.airflow
    if state.airflow_source and airflows:
        value = airflows.get(state.airflow_source)
        if value is not None and value > 0:
            return value
    return None


def run_process(
    process: Process,
    points: Union[Mapping[str, AirState], Iterable[AirState]],
    pressure: Optional[float] = None,
    constants: ConstantsLike = None,
    airflows: Optional[Mapping[str, float]] = None,
) -> ProcessOutput:
    """
    Apply a Process record to a system's state points.

    The to-point is updated in place with the computed outlet properties, so
    its identity (id, name, season, order, color) is preserved. A missing
    ``airflow`` parameter is taken from the from-point.
    """
    by_id = dict(points) if isinstance(points, Mapping) else {p.id: p for p in points}

    try:
        inlet = by_id[process.from_point_id]
        target = by_id[process.to_point_id]
    except KeyError as e:
        raise InvalidInputError(f"Process {process.id} references unknown state point {e}")

    parameters = dict(process.parameters)
    if parameters.get("airflow") is None:
        airflow = resolve_airflow(inlet, airflows)
        if airflow is None:
            raise InvalidInputError(
                f"Process {process.id} has no airflow and state {inlet.id} provides none"
            )
        parameters["airflow"] = airflow

    output = apply_process(process.type, inlet, parameters, pressure, constants)
    target.assign_properties(output.outlet)
    if target.airflow is None and target.airflow_source is None:
        target.airflow = parameters["airflow"]
    return output
