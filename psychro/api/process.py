"""
API routes for psychrometric process calculations.
"""

from fastapi import APIRouter, HTTPException

from psychro.engine.process_runner import apply_process
from psychro.engine.state_resolver import resolve_state_point
from psychro.models.process import ProcessOutput, ProcessRequest

router = APIRouter(prefix="/api/v1", tags=["process"])


@router.post("/process", response_model=ProcessOutput)
async def calculate_process(data: ProcessRequest) -> ProcessOutput:
    """
    Calculate a psychrometric process.

    Resolves the inlet from its input pair and dispatches to the solver for
    process_type. Returns inlet, outlet, energy balance, plausibility and
    any warnings.
    """
    try:
        inlet = resolve_state_point(
            input_pair=data.start_point_pair,
            values=data.start_point_values,
            pressure=data.pressure,
            constants=data.constants,
            name="inlet",
        )
        return apply_process(
            data.process_type,
            inlet,
            data.parameters,
            pressure=data.pressure,
            constants=data.constants,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Calculation error: {str(e)}")
