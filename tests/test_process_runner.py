"""
Tests for process dispatch and applying Process records to state points.
"""

import pytest

from psychro.engine.process_runner import (
    apply_process,
    get_solver,
    resolve_airflow,
    run_process,
)
from psychro.engine.processes.cooling import CoolingSolver
from psychro.engine.state_resolver import resolve_state_point
from psychro.errors import InvalidInputError
from psychro.models.process import HeatingParams, Process, ProcessType


class TestDispatch:
    def test_solver_lookup(self):
        assert isinstance(get_solver("cooling"), CoolingSolver)
        assert get_solver(ProcessType.MIXING).process_type == ProcessType.MIXING

    def test_unknown_type(self):
        with pytest.raises(InvalidInputError, match="Unknown process type"):
            get_solver("freezing")

    def test_params_model_instance(self):
        inlet = resolve_state_point(("Tdb", "RH"), (10.0, 80.0))
        params = HeatingParams(airflow=1000.0, capacity=10.0)
        output = apply_process(ProcessType.HEATING, inlet, params)
        assert output.result.total_heat == pytest.approx(10.0)

    def test_unknown_parameter_rejected(self):
        inlet = resolve_state_point(("Tdb", "RH"), (10.0, 80.0))
        with pytest.raises(InvalidInputError, match="Invalid parameters for heating"):
            apply_process(
                ProcessType.HEATING, inlet, {"airflow": 1000.0, "capacity": 10.0, "shf": 0.8}
            )

    def test_pressure_defaults_to_inlet(self):
        inlet = resolve_state_point(("Tdb", "RH"), (10.0, 80.0), pressure=90.0)
        output = apply_process(ProcessType.HEATING, inlet, {"airflow": 1000.0, "capacity": 10.0})
        assert output.outlet.pressure == 90.0

    def test_constants_override(self):
        inlet = resolve_state_point(("Tdb", "RH"), (10.0, 80.0))
        base = apply_process(ProcessType.HEATING, inlet, {"airflow": 1000.0, "capacity": 10.0})
        custom = apply_process(
            ProcessType.HEATING,
            inlet,
            {"airflow": 1000.0, "capacity": 10.0},
            constants={"cp_air": 1.1},
        )
        assert custom.outlet.Tdb != pytest.approx(base.outlet.Tdb)


class TestRunProcess:
    def setup_method(self):
        self.start = resolve_state_point(
            ("Tdb", "RH"), (28.0, 60.0), name="Mixed", airflow=1000.0
        )
        self.end = resolve_state_point(("Tdb", "RH"), (20.0, 50.0), name="Supply", order=2)
        self.points = [self.start, self.end]

    def test_updates_to_point_in_place(self):
        end_id = self.end.id
        process = Process(
            type=ProcessType.COOLING,
            from_point_id=self.start.id,
            to_point_id=self.end.id,
            parameters={"mode": "outlet_condition", "outlet_Tdb": 14.0, "outlet_RH": 95.0},
        )
        output = run_process(process, self.points)

        assert self.end.id == end_id
        assert self.end.name == "Supply"
        assert self.end.order == 2
        assert self.end.Tdb == pytest.approx(14.0)
        assert self.end.W == pytest.approx(output.outlet.W)
        assert self.end.airflow == 1000.0

    def test_airflow_from_parameters(self):
        process = Process(
            type=ProcessType.HEATING,
            from_point_id=self.start.id,
            to_point_id=self.end.id,
            parameters={"airflow": 2000.0, "capacity": 10.0},
        )
        output = run_process(process, {p.id: p for p in self.points})
        assert output.metadata["airflow"] == 2000.0

    def test_airflow_from_design_airflows(self):
        start = resolve_state_point(("Tdb", "RH"), (10.0, 80.0), airflow_source="supply")
        end = resolve_state_point(("Tdb", "RH"), (20.0, 50.0))
        process = Process(
            type=ProcessType.HEATING,
            from_point_id=start.id,
            to_point_id=end.id,
            parameters={"capacity": 10.0},
        )
        output = run_process(process, [start, end], airflows={"supply": 1500.0})
        assert output.metadata["airflow"] == 1500.0

    def test_missing_airflow(self):
        start = resolve_state_point(("Tdb", "RH"), (10.0, 80.0))
        process = Process(
            type=ProcessType.HEATING,
            from_point_id=start.id,
            to_point_id=self.end.id,
            parameters={"capacity": 10.0},
        )
        with pytest.raises(InvalidInputError, match="no airflow"):
            run_process(process, [start, self.end])

    def test_unknown_point(self):
        process = Process(
            type=ProcessType.HEATING,
            from_point_id="missing",
            to_point_id=self.end.id,
            parameters={"capacity": 10.0},
        )
        with pytest.raises(InvalidInputError, match="unknown state point"):
            run_process(process, self.points)

    def test_chained_processes(self):
        reheat = resolve_state_point(("Tdb", "RH"), (20.0, 50.0), name="Reheat")
        cooling = Process(
            type=ProcessType.COOLING,
            from_point_id=self.start.id,
            to_point_id=self.end.id,
            parameters={"mode": "outlet_condition", "outlet_Tdb": 13.0, "outlet_RH": 95.0},
        )
        heating = Process(
            type=ProcessType.HEATING,
            from_point_id=self.end.id,
            to_point_id=reheat.id,
            parameters={"mode": "temperature", "outlet_Tdb": 18.0},
        )
        points = [self.start, self.end, reheat]
        run_process(cooling, points)
        run_process(heating, points)
        assert reheat.Tdb == pytest.approx(18.0)
        assert reheat.W == pytest.approx(self.end.W)
        assert reheat.airflow == 1000.0


class TestResolveAirflow:
    def test_own_airflow(self):
        state = resolve_state_point(("Tdb", "RH"), (20.0, 50.0), airflow=800.0)
        assert resolve_airflow(state) == 800.0

    def test_named_airflow(self):
        state = resolve_state_point(("Tdb", "RH"), (20.0, 50.0), airflow_source="return")
        assert resolve_airflow(state, {"return": 600.0}) == 600.0
        assert resolve_airflow(state, {"supply": 600.0}) is None

    def test_none(self):
        state = resolve_state_point(("Tdb", "RH"), (20.0, 50.0))
        assert resolve_airflow(state) is None
