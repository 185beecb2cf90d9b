"""
Pydantic models for state point input/output.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from psychro.config import Season
from psychro.models.constants import ConstantsOverride

# Fields recomputed by the resolver; identity metadata is never touched.
PHYSICAL_FIELDS = (
    "pressure",
    "input_pair",
    "input_values",
    "Tdb",
    "Twb",
    "Tdp",
    "RH",
    "W",
    "h",
    "v",
    "Pv",
    "Ps",
    "mu",
    "warnings",
)


class StatePointInput(BaseModel):
    """Input model for resolving a state point from two known properties."""

    input_pair: tuple[str, str] = Field(
        ...,
        description="Pair of independent properties, e.g. ('Tdb', 'RH')",
        examples=[("Tdb", "RH"), ("Tdb", "Twb")],
    )
    values: tuple[float, float] = Field(
        ...,
        description="Values for the input pair, in order matching input_pair",
        examples=[(25.0, 60.0), (25.0, 19.5)],
    )
    pressure: Optional[float] = Field(
        default=None,
        description="Total pressure in kPa (standard pressure when omitted)",
    )
    constants: Optional[ConstantsOverride] = Field(
        default=None,
        description="Partial overrides of the physical constants",
    )
    name: str = Field(
        default="",
        description="Optional user-facing label for this state point",
    )


class AirState(BaseModel):
    """Fully resolved moist-air state plus its identity metadata."""

    # Identity
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = ""
    season: Season = Season.BOTH
    order: int = 0
    color: Optional[str] = None
    airflow: Optional[float] = Field(default=None, description="Airflow (m³/h)")
    airflow_source: Optional[str] = Field(
        default=None, description="Name of a design airflow to use when airflow is unset"
    )

    # Input echo
    pressure: float = Field(..., description="Total pressure (kPa)")
    input_pair: tuple[str, str]
    input_values: tuple[float, float]

    # Resolved properties
    Tdb: float = Field(..., description="Dry-bulb temperature (°C)")
    Twb: float = Field(..., description="Wet-bulb temperature (°C)")
    Tdp: float = Field(..., description="Dew point temperature (°C), -inf for dry air")
    RH: float = Field(..., description="Relative humidity (0-100%)")
    W: float = Field(..., description="Humidity ratio (kg_w/kg_da)")
    h: float = Field(..., description="Specific enthalpy (kJ/kg_da)")
    v: float = Field(..., description="Specific volume (m³/kg_da)")
    Pv: float = Field(..., description="Partial vapor pressure (kPa)")
    Ps: float = Field(..., description="Saturation pressure at Tdb (kPa)")
    mu: float = Field(..., description="Degree of saturation (0-1)")

    warnings: list[str] = Field(default_factory=list)

    @property
    def rho(self) -> float:
        """Moist air density per unit dry air (kg/m³)."""
        return 1.0 / self.v

    def assign_properties(self, other: "AirState") -> "AirState":
        """Copy the physical properties of ``other`` onto this state in place."""
        for name in PHYSICAL_FIELDS:
            value = getattr(other, name)
            setattr(self, name, list(value) if name == "warnings" else value)
        return self
