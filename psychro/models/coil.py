"""
Pydantic models for coil capacity analysis input/output.
"""

from typing import Optional

from pydantic import BaseModel, Field

from psychro.models.constants import ConstantsOverride


class CoilCapacity(BaseModel):
    """Air-side coil duty between two states (outlet minus inlet, signed)."""

    total_capacity: float = Field(..., description="Total heat (kW)")
    sensible_capacity: float = Field(..., description="Sensible heat (kW)")
    latent_capacity: float = Field(..., description="Latent heat (kW)")
    shf: Optional[float] = Field(default=None, description="Sensible heat factor")
    temperature_diff: float
    humidity_diff: float
    enthalpy_diff: float
    mass_flow: float = Field(..., description="Dry-air mass flow (kg_da/s)")


class CoilResult(CoilCapacity):
    """Coil duty with optional water-side balance."""

    water_side_capacity: Optional[float] = Field(default=None, description="Water-side heat (kW)")
    heat_balance: Optional[float] = Field(
        default=None, description="|Q_water + Q_air| / |Q_air| (%)"
    )
    condensate_removal: Optional[float] = Field(
        default=None, description="Condensate removed (L/h), cooling coils only"
    )
    estimated_rows: Optional[int] = None
    adp_Tdb: Optional[float] = Field(default=None, description="Apparatus dew point (°C)")
    bypass_factor: Optional[float] = None
    warnings: list[str] = Field(default_factory=list)


class CoilInput(BaseModel):
    """API input for a coil capacity calculation."""

    cooling: bool = Field(default=True, description="Cooling coil (False: heating coil)")
    entering_pair: tuple[str, str]
    entering_values: tuple[float, float]
    leaving_pair: tuple[str, str]
    leaving_values: tuple[float, float]
    airflow: float = Field(..., gt=0, description="Airflow (m³/h)")
    pressure: Optional[float] = Field(default=None, description="Total pressure (kPa)")
    constants: Optional[ConstantsOverride] = None

    # Optional water side
    water_flow: Optional[float] = Field(default=None, gt=0, description="Water flow (L/min)")
    water_entering_temp: Optional[float] = None
    water_leaving_temp: Optional[float] = None
    face_velocity: float = Field(default=2.5, gt=0, description="Coil face velocity (m/s)")
