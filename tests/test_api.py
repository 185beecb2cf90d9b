"""
API-level tests for the state point, process and coil endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from psychro.main import app

client = TestClient(app)


def approx(value: float, rel_tol: float = 0.01, abs_tol: float = 0.1):
    return pytest.approx(value, rel=rel_tol, abs=abs_tol)


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "psychro-engine"}


class TestStatePointEndpoint:
    def test_resolve(self):
        resp = client.post(
            "/api/v1/state-point",
            json={"input_pair": ["Tdb", "RH"], "values": [25.0, 60.0], "name": "Room"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Room"
        assert data["W"] == approx(0.01189, abs_tol=1e-4)
        assert data["h"] == approx(55.4, abs_tol=0.2)
        assert data["pressure"] == 101.325

    def test_pressure_and_constants(self):
        resp = client.post(
            "/api/v1/state-point",
            json={
                "input_pair": ["Tdb", "RH"],
                "values": [25.0, 60.0],
                "pressure": 90.0,
                "constants": {"cp_vapor": 1.86},
            },
        )
        assert resp.status_code == 200
        assert resp.json()["pressure"] == 90.0

    def test_ambiguous_pair(self):
        resp = client.post(
            "/api/v1/state-point",
            json={"input_pair": ["Tdp", "W"], "values": [15.0, 0.0107]},
        )
        assert resp.status_code == 422
        assert "dry-bulb" in resp.json()["detail"]

    def test_out_of_range_rh(self):
        resp = client.post(
            "/api/v1/state-point",
            json={"input_pair": ["Tdb", "RH"], "values": [25.0, 150.0]},
        )
        assert resp.status_code == 422

    def test_unknown_constant(self):
        resp = client.post(
            "/api/v1/state-point",
            json={"input_pair": ["Tdb", "RH"], "values": [25.0, 60.0], "constants": {"foo": 1}},
        )
        assert resp.status_code == 422


class TestPressureFromAltitude:
    def test_sea_level(self):
        resp = client.get("/api/v1/pressure-from-altitude", params={"altitude": 0})
        assert resp.status_code == 200
        assert resp.json()["pressure"] == approx(101.325, abs_tol=0.01)


class TestProcessEndpoint:
    def test_heating(self):
        resp = client.post(
            "/api/v1/process",
            json={
                "process_type": "heating",
                "start_point_pair": ["Tdb", "RH"],
                "start_point_values": [10.0, 80.0],
                "parameters": {"mode": "capacity", "airflow": 1000.0, "capacity": 30.0},
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"]["total_heat"] == approx(30.0, abs_tol=1e-4)
        assert data["outlet"]["Tdb"] == approx(96.0, abs_tol=0.5)
        assert data["plausible"] is True
        assert len(data["path_points"]) == 13

    def test_cooling_sign(self):
        resp = client.post(
            "/api/v1/process",
            json={
                "process_type": "cooling",
                "start_point_pair": ["Tdb", "RH"],
                "start_point_values": [28.0, 60.0],
                "parameters": {
                    "mode": "capacity_shf",
                    "airflow": 1000.0,
                    "capacity": 2.0,
                    "shf": 0.8,
                },
            },
        )
        assert resp.status_code == 200
        assert resp.json()["result"]["total_heat"] == approx(-2.0, abs_tol=1e-4)

    def test_mixing_with_state_payload(self):
        other = client.post(
            "/api/v1/state-point",
            json={"input_pair": ["Tdb", "RH"], "values": [20.0, 40.0]},
        ).json()
        resp = client.post(
            "/api/v1/process",
            json={
                "process_type": "mixing",
                "start_point_pair": ["Tdb", "RH"],
                "start_point_values": [30.0, 60.0],
                "parameters": {
                    "airflow": 600.0,
                    "streams": [{"state": other, "airflow": 400.0}],
                },
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"]["total_heat"] == 0.0
        assert 20.0 < data["outlet"]["Tdb"] < 30.0

    def test_missing_parameter(self):
        resp = client.post(
            "/api/v1/process",
            json={
                "process_type": "heating",
                "start_point_pair": ["Tdb", "RH"],
                "start_point_values": [10.0, 80.0],
                "parameters": {"mode": "capacity", "airflow": 1000.0},
            },
        )
        assert resp.status_code == 422
        assert "capacity" in resp.json()["detail"]

    def test_unknown_process_type(self):
        resp = client.post(
            "/api/v1/process",
            json={
                "process_type": "freezing",
                "start_point_pair": ["Tdb", "RH"],
                "start_point_values": [10.0, 80.0],
            },
        )
        assert resp.status_code == 422


class TestCoilEndpoint:
    def test_cooling_coil(self):
        resp = client.post(
            "/api/v1/coil-capacity",
            json={
                "entering_pair": ["Tdb", "RH"],
                "entering_values": [28.0, 60.0],
                "leaving_pair": ["Tdb", "RH"],
                "leaving_values": [14.0, 95.0],
                "airflow": 1000.0,
                "water_flow": 60.0,
                "water_entering_temp": 7.0,
                "water_leaving_temp": 12.0,
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_capacity"] < 0
        assert data["water_side_capacity"] == approx(20.93, abs_tol=0.01)
        assert data["condensate_removal"] > 0

    def test_wet_bulb_above_dry_bulb(self):
        resp = client.post(
            "/api/v1/coil-capacity",
            json={
                "entering_pair": ["Tdb", "Twb"],
                "entering_values": [20.0, 25.0],
                "leaving_pair": ["Tdb", "RH"],
                "leaving_values": [14.0, 95.0],
                "airflow": 1000.0,
            },
        )
        assert resp.status_code == 422
