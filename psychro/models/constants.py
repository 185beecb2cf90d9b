"""
Pydantic models for the physical constants used by the engine.

The defaults are a frozen, process-wide instance. Callers pass partial
overrides per calculation; they are overlaid onto a copy and never written
back to the defaults.
"""

import math
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from psychro.config import STANDARD_PRESSURE
from psychro.errors import InvalidInputError


class TetensCoefficients(BaseModel):
    """Coefficients of Ps = A·exp(B·t / (C + t)), Ps in kPa, t in °C."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    A: float = Field(..., gt=0)
    B: float = Field(..., gt=0)
    C: float = Field(..., gt=0)


class PsychrometricConstants(BaseModel):
    """Complete set of constants for one calculation chain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    standard_pressure: float = Field(
        default=STANDARD_PRESSURE, gt=0, description="Default total pressure (kPa)"
    )
    cp_air: float = Field(default=1.006, gt=0, description="Dry air cp (kJ/kg·K)")
    cp_vapor: float = Field(default=1.805, gt=0, description="Water vapor cp (kJ/kg·K)")
    cp_water: float = Field(default=4.186, gt=0, description="Liquid water cp (kJ/kg·K)")
    latent_heat_0c: float = Field(
        default=2501.0, gt=0, description="Latent heat of vaporization at 0 °C (kJ/kg)"
    )
    molecular_weight_ratio: float = Field(
        default=0.622, gt=0, description="Mw / Ma"
    )
    r_air: float = Field(default=0.287, gt=0, description="Dry air gas constant (kJ/kg·K)")
    vapor_volume_factor: float = Field(
        default=1.608, gt=0, description="Ma / Mw, used in the specific volume"
    )
    wet_bulb_coefficient: float = Field(
        default=6.62e-4, gt=0, description="Psychrometer coefficient (1/K)"
    )
    convergence_tolerance: float = Field(
        default=0.001, gt=0, description="Wet-bulb Newton step tolerance (°C)"
    )
    max_iterations: int = Field(default=100, gt=0)
    bisection_tolerance: float = Field(
        default=1e-9, gt=0, description="Dry-bulb search tolerance (°C)"
    )
    bisection_iterations: int = Field(default=60, gt=0)
    tetens_water: TetensCoefficients = TetensCoefficients(A=0.61078, B=17.27, C=237.3)
    tetens_ice: TetensCoefficients = TetensCoefficients(A=0.61078, B=21.875, C=265.5)


class TetensOverride(BaseModel):
    A: Optional[float] = None
    B: Optional[float] = None
    C: Optional[float] = None


class ConstantsOverride(BaseModel):
    """Partial constants; unset fields keep their default."""

    model_config = ConfigDict(extra="forbid")

    standard_pressure: Optional[float] = None
    cp_air: Optional[float] = None
    cp_vapor: Optional[float] = None
    cp_water: Optional[float] = None
    latent_heat_0c: Optional[float] = None
    molecular_weight_ratio: Optional[float] = None
    r_air: Optional[float] = None
    vapor_volume_factor: Optional[float] = None
    wet_bulb_coefficient: Optional[float] = None
    convergence_tolerance: Optional[float] = None
    max_iterations: Optional[int] = None
    bisection_tolerance: Optional[float] = None
    bisection_iterations: Optional[int] = None
    tetens_water: Optional[TetensOverride] = None
    tetens_ice: Optional[TetensOverride] = None


DEFAULT_CONSTANTS = PsychrometricConstants()

ConstantsLike = Union[PsychrometricConstants, ConstantsOverride, Mapping[str, Any], None]

_NESTED_FIELDS = ("tetens_water", "tetens_ice")


def resolve_constants(
    overrides: ConstantsLike = None,
    base: PsychrometricConstants = DEFAULT_CONSTANTS,
) -> PsychrometricConstants:
    """
    Overlay partial overrides onto ``base`` and return a complete constants set.

    The Tetens coefficient sets are merged key by key, so overriding only
    ``{"tetens_ice": {"B": 22.0}}`` keeps the other coefficients.
    """
    if overrides is None:
        return base
    if isinstance(overrides, PsychrometricConstants):
        return overrides
    if isinstance(overrides, ConstantsOverride):
        patch = overrides.model_dump(exclude_none=True)
    else:
        patch = dict(overrides)

    if not patch:
        return base

    merged = base.model_dump()
    for key, value in patch.items():
        if key in _NESTED_FIELDS and isinstance(value, Mapping):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value

    try:
        return PsychrometricConstants(**merged)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid constants override: {e}") from e


def effective_pressure(
    pressure: Optional[float], constants: PsychrometricConstants
) -> float:
    """Return ``pressure`` or the standard pressure, validated as finite and positive."""
    P = constants.standard_pressure if pressure is None else float(pressure)
    if not math.isfinite(P) or P <= 0:
        raise InvalidInputError(f"Pressure must be a positive finite value, got {pressure}")
    return P
