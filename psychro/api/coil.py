"""
API routes for coil capacity calculations.
"""

from fastapi import APIRouter, HTTPException

from psychro.engine.coil import analyze_coil
from psychro.models.coil import CoilInput, CoilResult

router = APIRouter(prefix="/api/v1", tags=["coil"])


@router.post("/coil-capacity", response_model=CoilResult)
async def coil_capacity(data: CoilInput) -> CoilResult:
    """
    Coil duty between an entering and a leaving state.

    Optionally provide water flow and temperatures for a water-side heat
    balance. Cooling coils also report condensate, ADP and bypass factor.
    """
    try:
        return analyze_coil(data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Calculation error: {str(e)}")
