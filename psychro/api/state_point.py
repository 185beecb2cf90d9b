"""
API routes for state point resolution.
"""

from fastapi import APIRouter, HTTPException

from psychro.engine.state_resolver import pressure_from_altitude, resolve_state_point
from psychro.models.state_point import AirState, StatePointInput

router = APIRouter(prefix="/api/v1", tags=["state-point"])


@router.post("/state-point", response_model=AirState)
async def create_state_point(data: StatePointInput) -> AirState:
    """
    Resolve a full psychrometric state point from two independent properties.

    Accepts any supported input pair (e.g., Tdb+RH, Twb+h, RH+Tdp, etc.)
    and returns all psychrometric properties.
    """
    try:
        return resolve_state_point(
            input_pair=data.input_pair,
            values=data.values,
            pressure=data.pressure,
            constants=data.constants,
            name=data.name,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Calculation error: {str(e)}")


@router.get("/pressure-from-altitude")
async def get_pressure_from_altitude(altitude: float) -> dict:
    """
    Convert altitude (m) to standard-atmosphere pressure (kPa).
    """
    try:
        pressure = pressure_from_altitude(altitude)
        return {"altitude": altitude, "pressure": round(pressure, 6)}
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Calculation error: {str(e)}")
