"""
Pydantic models for psychrometric process input/output.
"""

import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from psychro.config import Season
from psychro.models.constants import ConstantsOverride
from psychro.models.state_point import AirState


class ProcessType(str, Enum):
    HEATING = "heating"
    COOLING = "cooling"
    HUMIDIFYING = "humidifying"
    MIXING = "mixing"
    HEAT_EXCHANGE = "heat_exchange"


class OperationMode(str, Enum):
    HEATING = "heating"
    COOLING = "cooling"


class HeatingMode(str, Enum):
    CAPACITY = "capacity"        # heating capacity (kW) → outlet state
    TEMPERATURE = "temperature"  # outlet dry-bulb → required capacity


class CoolingMode(str, Enum):
    CAPACITY_SHF = "capacity_shf"              # capacity + SHF → outlet
    CAPACITY_OUTLET_RH = "capacity_outlet_rh"  # capacity + outlet RH → outlet
    OUTLET_CONDITION = "outlet_condition"      # outlet Tdb + RH → capacity
    APPARATUS_DEW_POINT = "apparatus_dew_point"  # ADP + bypass factor → outlet


class HumidifyingMode(str, Enum):
    WATER_SPRAY = "water_spray"
    STEAM = "steam"
    EVAPORATIVE = "evaporative"


class HumidifierType(str, Enum):
    WATER = "water"
    STEAM = "steam"


class HeatExchangeMode(str, Enum):
    TOTAL = "total"        # single total-heat efficiency
    SEPARATE = "separate"  # separate sensible / latent efficiencies


# ---------------------------------------------------------------------------
# Per-type parameter bundles
# ---------------------------------------------------------------------------

class HeatingParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: HeatingMode = HeatingMode.CAPACITY
    airflow: float = Field(..., allow_inf_nan=False, gt=0, description="Airflow (m³/h)")
    capacity: Optional[float] = Field(default=None, ge=0, description="Heating capacity (kW)")
    outlet_Tdb: Optional[float] = Field(default=None, description="Outlet dry-bulb (°C)")


class CoolingParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: CoolingMode = CoolingMode.CAPACITY_SHF
    airflow: float = Field(..., allow_inf_nan=False, gt=0, description="Airflow (m³/h)")
    capacity: Optional[float] = Field(default=None, ge=0, description="Cooling capacity magnitude (kW)")
    shf: Optional[float] = Field(default=None, ge=0, le=1, description="Sensible heat factor")
    outlet_RH: Optional[float] = Field(default=None, gt=0, le=100, description="Outlet RH (%)")
    outlet_Tdb: Optional[float] = Field(default=None, description="Outlet dry-bulb (°C)")
    adp_Tdb: Optional[float] = Field(default=None, description="Apparatus dew point (°C)")
    bypass_factor: Optional[float] = Field(default=None, ge=0, lt=1)


class HumidifyingParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: HumidifyingMode = HumidifyingMode.WATER_SPRAY
    airflow: float = Field(..., allow_inf_nan=False, gt=0, description="Airflow (m³/h)")
    capacity: Optional[float] = Field(default=None, ge=0, description="Water added (kg/h)")
    water_temp: float = Field(default=15.0, description="Spray water temperature (°C)")
    steam_temp: float = Field(default=100.0, description="Steam temperature (°C)")
    efficiency: float = Field(default=80.0, ge=0, le=100, description="Evaporative efficiency (%)")


class MixingStream(BaseModel):
    state: AirState
    airflow: Optional[float] = Field(default=None, allow_inf_nan=False, gt=0, description="Airflow (m³/h)")


class MixingParams(BaseModel):
    """
    Mixing of the inlet stream with one or more other streams.

    When ``ratio`` is set the mix is by dry-air mass fraction of the inlet
    stream (exactly one other stream) and stream airflows are not needed.
    """

    model_config = ConfigDict(extra="forbid")

    airflow: float = Field(..., allow_inf_nan=False, gt=0, description="Inlet stream airflow (m³/h)")
    streams: list[MixingStream] = Field(default_factory=list)
    ratio: Optional[float] = Field(default=None, ge=0, le=1)


class HeatExchangeParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: HeatExchangeMode = HeatExchangeMode.TOTAL
    exhaust: AirState
    airflow: float = Field(..., allow_inf_nan=False, gt=0, description="Supply (outdoor) airflow entering (m³/h)")
    supply_airflow_out: Optional[float] = Field(default=None, allow_inf_nan=False, description="Supply airflow leaving (m³/h)")
    exhaust_airflow: Optional[float] = Field(default=None, allow_inf_nan=False, description="Exhaust airflow entering (m³/h)")
    exhaust_airflow_out: Optional[float] = Field(default=None, allow_inf_nan=False, description="Exhaust airflow leaving (m³/h)")
    efficiency: Optional[float] = Field(default=None, ge=0, le=100, description="Total heat efficiency (%)")
    sensible_efficiency: Optional[float] = Field(default=None, ge=0, le=100)
    latent_efficiency: Optional[float] = Field(default=None, ge=0, le=100)
    both_sides: bool = Field(default=False, description="Also compute the leaving exhaust state")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class ProcessResult(BaseModel):
    """Energy and property changes across a process, outlet minus inlet."""

    total_heat: float = Field(..., description="Total heat (kW), heating > 0")
    sensible_heat: float = Field(..., description="Sensible heat (kW)")
    latent_heat: float = Field(..., description="Latent heat (kW)")
    enthalpy_diff: float = Field(..., description="Δh (kJ/kg_da)")
    humidity_diff: float = Field(..., description="ΔW (kg/kg_da)")
    temperature_diff: float = Field(..., description="ΔTdb (K)")
    mass_flow: float = Field(default=0.0, description="Dry-air mass flow (kg_da/s)")
    shf: Optional[float] = Field(default=None, description="Sensible heat factor (0-1)")


class PathPoint(BaseModel):
    """A point along a process path for chart rendering."""

    Tdb: float
    W: float


class ProcessOutput(BaseModel):
    """Result of a process calculation."""

    process_type: ProcessType
    inlet: AirState
    outlet: AirState
    result: ProcessResult

    declared_mode: Optional[OperationMode] = None
    inferred_mode: Optional[OperationMode] = None
    plausible: bool = True

    path_points: list[PathPoint] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class Process(BaseModel):
    """A process record linking two state points of a system."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = ""
    type: ProcessType
    season: Season = Season.BOTH
    order: int = 0
    from_point_id: str
    to_point_id: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class ProcessRequest(BaseModel):
    """
    API input for one process.

    The inlet is resolved from an input pair; other states referenced by the
    parameters (mixing streams, heat exchanger exhaust) are full AirState
    payloads as returned by the state point endpoint.
    """

    process_type: ProcessType
    start_point_pair: tuple[str, str]
    start_point_values: tuple[float, float]
    parameters: dict[str, Any] = Field(default_factory=dict)
    pressure: Optional[float] = Field(default=None, description="Total pressure (kPa)")
    constants: Optional[ConstantsOverride] = None
