"""
Tests for the state point resolver.

Reference values use the Tetens/psychrometer relations at 101.325 kPa.
Every solvable input pair is checked by resolving a known state from two of
its own properties and comparing the rest.
"""

import math

import pytest

from psychro.config import SUPPORTED_INPUT_PAIRS
from psychro.engine.saturation import lowest_temperature
from psychro.engine.state_resolver import (
    pressure_from_altitude,
    recompute_state_point,
    resolve_state_point,
)
from psychro.errors import AmbiguousPairError, ConvergenceWarning, InvalidInputError


def approx(value: float, rel_tol: float = 0.01, abs_tol: float = 0.1):
    return pytest.approx(value, rel=rel_tol, abs=abs_tol)


# ---------------------------------------------------------------------------
# Reference state: 25 °C, 60% RH
# ---------------------------------------------------------------------------

class TestReferenceState:
    def setup_method(self):
        self.state = resolve_state_point(("Tdb", "RH"), (25.0, 60.0))

    def test_humidity_ratio(self):
        assert self.state.W == approx(0.01189, rel_tol=0.005, abs_tol=1e-5)

    def test_enthalpy(self):
        assert self.state.h == approx(55.4, abs_tol=0.2)

    def test_wet_bulb(self):
        assert self.state.Twb == approx(19.5, abs_tol=0.3)

    def test_dew_point(self):
        assert self.state.Tdp == approx(16.7, abs_tol=0.2)

    def test_specific_volume(self):
        assert self.state.v == approx(0.861, abs_tol=0.002)
        assert self.state.rho == pytest.approx(1.0 / self.state.v)

    def test_pressure_and_echo(self):
        assert self.state.pressure == 101.325
        assert self.state.input_pair == ("Tdb", "RH")
        assert self.state.input_values == (25.0, 60.0)
        assert self.state.warnings == []

    def test_degree_of_saturation_below_one(self):
        assert 0.0 < self.state.mu < 1.0

    def test_vapor_pressures(self):
        assert self.state.Pv == pytest.approx(0.6 * self.state.Ps)


# ---------------------------------------------------------------------------
# Round trips across every solvable pair
# ---------------------------------------------------------------------------

SOLVABLE_PAIRS = [p for p in SUPPORTED_INPUT_PAIRS if set(p) != {"Tdp", "W"}]


@pytest.mark.parametrize("base", [(25.0, 60.0), (32.0, 40.0)])
@pytest.mark.parametrize("pair", SOLVABLE_PAIRS)
def test_round_trip(pair, base):
    reference = resolve_state_point(("Tdb", "RH"), base)
    values = tuple(getattr(reference, kind) for kind in pair)
    state = resolve_state_point(pair, values)

    assert state.Tdb == pytest.approx(reference.Tdb, abs=1e-3)
    assert state.W == pytest.approx(reference.W, abs=1e-6)
    assert state.RH == pytest.approx(reference.RH, abs=1e-2)
    assert state.h == pytest.approx(reference.h, abs=1e-2)
    assert state.Twb == pytest.approx(reference.Twb, abs=1e-2)
    assert state.Tdp == pytest.approx(reference.Tdp, abs=1e-2)


def test_reversed_pair_is_normalized():
    state = resolve_state_point(("RH", "Tdb"), (60.0, 25.0))
    assert state.input_pair == ("Tdb", "RH")
    assert state.input_values == (25.0, 60.0)
    assert state.W == pytest.approx(resolve_state_point(("Tdb", "RH"), (25.0, 60.0)).W)


# ---------------------------------------------------------------------------
# Invalid and ambiguous input
# ---------------------------------------------------------------------------

class TestInvalidInput:
    def test_identical_kinds(self):
        with pytest.raises(InvalidInputError, match="two different properties"):
            resolve_state_point(("Tdb", "Tdb"), (20.0, 25.0))

    def test_unknown_kind(self):
        with pytest.raises(InvalidInputError, match="Unsupported input pair"):
            resolve_state_point(("Tdb", "enthalpy"), (20.0, 40.0))

    @pytest.mark.parametrize("rh", [-1.0, 100.5])
    def test_rh_out_of_range(self, rh):
        with pytest.raises(InvalidInputError, match="RH"):
            resolve_state_point(("Tdb", "RH"), (20.0, rh))

    def test_negative_humidity_ratio(self):
        with pytest.raises(InvalidInputError, match="Humidity ratio"):
            resolve_state_point(("Tdb", "W"), (20.0, -0.001))

    def test_non_finite_value(self):
        with pytest.raises(InvalidInputError, match="finite"):
            resolve_state_point(("Tdb", "RH"), (float("nan"), 50.0))

    def test_wet_bulb_above_dry_bulb(self):
        with pytest.raises(InvalidInputError, match="cannot exceed dry-bulb"):
            resolve_state_point(("Tdb", "Twb"), (20.0, 22.0))

    def test_dew_point_above_dry_bulb(self):
        with pytest.raises(InvalidInputError, match="cannot exceed dry-bulb"):
            resolve_state_point(("Tdb", "Tdp"), (20.0, 22.0))

    def test_enthalpy_below_dry_air(self):
        with pytest.raises(InvalidInputError, match="below the dry-air enthalpy"):
            resolve_state_point(("Tdb", "h"), (30.0, 10.0))

    def test_invalid_pressure(self):
        with pytest.raises(InvalidInputError, match="Pressure"):
            resolve_state_point(("Tdb", "RH"), (25.0, 50.0), pressure=-1.0)

    def test_unreachable_target(self):
        with pytest.raises(InvalidInputError, match="No dry-bulb temperature"):
            resolve_state_point(("RH", "h"), (50.0, 5000.0))

    def test_humidity_above_wet_bulb_saturation(self):
        with pytest.raises(InvalidInputError, match="No dry-bulb temperature"):
            resolve_state_point(("Twb", "W"), (20.0, 0.05))

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            resolve_state_point(("Tdb", "RH"), (25.0, 150.0))


class TestTemperatureRange:
    """The Tetens poles and absolute zero bound every temperature from below."""

    @pytest.mark.parametrize("Tdb", [-265.5, -273.15, -300.0])
    def test_dry_bulb_at_or_below_limit(self, Tdb):
        with pytest.raises(InvalidInputError, match="must be above"):
            resolve_state_point(("Tdb", "W"), (Tdb, 0.001))

    def test_wet_bulb_below_limit(self):
        with pytest.raises(InvalidInputError, match="Twb must be above"):
            resolve_state_point(("Tdb", "Twb"), (20.0, -280.0))

    def test_dew_point_below_limit(self):
        with pytest.raises(InvalidInputError, match="Tdp must be above"):
            resolve_state_point(("Tdb", "Tdp"), (20.0, -250.0))

    def test_derived_dry_bulb_below_limit(self):
        with pytest.raises(InvalidInputError, match="outside the supported range"):
            resolve_state_point(("W", "h"), (0.0, -400.0))

    def test_lowest_limit_value(self):
        assert lowest_temperature() == pytest.approx(-237.3)

    def test_cold_dry_air_is_physical(self):
        state = resolve_state_point(("Tdb", "W"), (-100.0, 0.0))
        assert state.v > 0
        assert state.RH == 0.0


# ---------------------------------------------------------------------------
# Enthalpy and dew point
# ---------------------------------------------------------------------------

class TestEnthalpyAndDewPoint:
    def test_dew_point_is_kept(self):
        state = resolve_state_point(("h", "Tdp"), (50.0, 10.0))
        assert state.Tdp == pytest.approx(10.0, abs=1e-6)
        assert state.Tdb == approx(30.3, abs_tol=0.1)
        assert not state.warnings

    def test_enthalpy_too_low_for_dew_point(self):
        """h = 20 kJ/kg with Tdp = 15 °C would put the dry bulb near -6.5 °C."""
        with pytest.raises(InvalidInputError, match="cannot exceed dry-bulb"):
            resolve_state_point(("h", "Tdp"), (20.0, 15.0))


class TestAmbiguousPairs:
    def test_dew_point_and_humidity_ratio(self):
        W = resolve_state_point(("Tdb", "Tdp"), (25.0, 15.0)).W
        with pytest.raises(AmbiguousPairError, match="cannot determine"):
            resolve_state_point(("Tdp", "W"), (15.0, W))

    def test_dew_point_and_humidity_ratio_inconsistent(self):
        with pytest.raises(AmbiguousPairError, match="inconsistent"):
            resolve_state_point(("Tdp", "W"), (15.0, 0.02))

    def test_reversed_ambiguous_pair(self):
        with pytest.raises(AmbiguousPairError):
            resolve_state_point(("W", "Tdp"), (0.0107, 15.0))

    def test_zero_rh_with_humidity_ratio(self):
        with pytest.raises(AmbiguousPairError):
            resolve_state_point(("RH", "W"), (0.0, 0.0))

    def test_zero_rh_with_dew_point(self):
        with pytest.raises(AmbiguousPairError):
            resolve_state_point(("RH", "Tdp"), (0.0, 10.0))


# ---------------------------------------------------------------------------
# Boundaries and physical behaviour
# ---------------------------------------------------------------------------

class TestBoundaries:
    def test_saturated_air(self):
        state = resolve_state_point(("Tdb", "RH"), (20.0, 100.0))
        assert state.RH == pytest.approx(100.0)
        assert state.Twb == pytest.approx(20.0, abs=1e-3)
        assert state.Tdp == pytest.approx(20.0, abs=1e-6)
        assert state.mu == pytest.approx(1.0)

    def test_bone_dry_air(self):
        state = resolve_state_point(("Tdb", "RH"), (20.0, 0.0))
        assert state.W == 0.0
        assert state.Pv == 0.0
        assert state.Tdp == -math.inf
        assert state.Twb < state.Tdb
        assert state.h == pytest.approx(1.006 * 20.0)

    def test_below_freezing(self):
        state = resolve_state_point(("Tdb", "RH"), (-10.0, 50.0))
        assert state.W > 0.0
        assert state.Twb < state.Tdb
        assert state.Tdp < state.Tdb

    def test_fog_state_is_clamped(self):
        state = resolve_state_point(("Tdb", "W"), (20.0, 0.03))
        assert state.RH == 100.0
        assert state.Twb == state.Tdb
        assert state.Tdp == state.Tdb
        assert any("fog" in w for w in state.warnings)

    def test_rh_falls_as_dry_bulb_rises(self):
        cool = resolve_state_point(("Tdb", "W"), (20.0, 0.008))
        warm = resolve_state_point(("Tdb", "W"), (30.0, 0.008))
        assert warm.RH < cool.RH
        assert warm.Tdp == pytest.approx(cool.Tdp)

    def test_enthalpy_rises_along_rh_line(self):
        cool = resolve_state_point(("Tdb", "RH"), (15.0, 50.0))
        warm = resolve_state_point(("Tdb", "RH"), (30.0, 50.0))
        assert warm.h > cool.h
        assert warm.W > cool.W

    def test_wet_bulb_rises_with_humidity(self):
        dry = resolve_state_point(("Tdb", "W"), (30.0, 0.006))
        humid = resolve_state_point(("Tdb", "W"), (30.0, 0.016))
        assert humid.Twb > dry.Twb

    def test_ordering_of_temperatures(self):
        for rh in (5.0, 30.0, 70.0, 95.0):
            state = resolve_state_point(("Tdb", "RH"), (30.0, rh))
            assert state.Tdp <= state.Twb <= state.Tdb

    def test_altitude_pressure_raises_humidity_ratio(self):
        sea = resolve_state_point(("Tdb", "RH"), (25.0, 60.0))
        high = resolve_state_point(("Tdb", "RH"), (25.0, 60.0), pressure=84.0)
        assert high.W > sea.W
        assert high.v > sea.v


# ---------------------------------------------------------------------------
# Iteration limits
# ---------------------------------------------------------------------------

class TestIterationLimits:
    def test_wet_bulb_non_convergence_is_reported(self):
        constants = {"max_iterations": 1, "convergence_tolerance": 1e-12}
        with pytest.warns(ConvergenceWarning):
            state = resolve_state_point(("Tdb", "RH"), (25.0, 60.0), constants=constants)
        assert any("did not converge" in w for w in state.warnings)

    def test_bisection_cap_is_reported(self):
        state = resolve_state_point(
            ("RH", "W"), (50.0, 0.01), constants={"bisection_iterations": 5}
        )
        assert any("stopped after" in w for w in state.warnings)

    def test_default_search_resolution(self):
        """Tolerance stops the search well inside the 60-iteration cap."""
        W = resolve_state_point(("Tdb", "RH"), (25.0, 60.0)).W
        state = resolve_state_point(("RH", "W"), (60.0, W))
        assert state.Tdb == pytest.approx(25.0, abs=1e-8)
        assert not state.warnings


# ---------------------------------------------------------------------------
# Identity metadata
# ---------------------------------------------------------------------------

class TestIdentity:
    def test_metadata_is_attached(self):
        state = resolve_state_point(
            ("Tdb", "RH"), (25.0, 60.0), name="Room", airflow=1200.0, order=2
        )
        assert state.name == "Room"
        assert state.airflow == 1200.0
        assert state.order == 2
        assert len(state.id) == 32

    def test_ids_are_unique(self):
        a = resolve_state_point(("Tdb", "RH"), (25.0, 60.0))
        b = resolve_state_point(("Tdb", "RH"), (25.0, 60.0))
        assert a.id != b.id

    def test_recompute_keeps_identity(self):
        state = resolve_state_point(("Tdb", "RH"), (25.0, 60.0), name="Room", color="#f00")
        original_id = state.id
        updated = recompute_state_point(state, ("Tdb", "RH"), (30.0, 40.0))
        assert updated is state
        assert state.id == original_id
        assert state.name == "Room"
        assert state.color == "#f00"
        assert state.Tdb == 30.0
        assert state.RH == pytest.approx(40.0)


# ---------------------------------------------------------------------------
# Altitude
# ---------------------------------------------------------------------------

class TestPressureFromAltitude:
    def test_sea_level(self):
        assert pressure_from_altitude(0.0) == approx(101.325, abs_tol=0.01)

    def test_1000m(self):
        assert pressure_from_altitude(1000.0) == approx(89.87, abs_tol=0.1)

    def test_decreases_with_altitude(self):
        assert pressure_from_altitude(2000.0) < pressure_from_altitude(500.0)
