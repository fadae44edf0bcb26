from fastapi import APIRouter, HTTPException

from upi_sim.schemas.requests import ValidateFieldRequest
from upi_sim.schemas.results import ValidationResult
from upi_sim.validators import VALIDATORS

router = APIRouter()


@router.post("/{field}", response_model=ValidationResult)
def validate_field(field: str, request: ValidateFieldRequest):
    """
    Run one field validator and return its verdict.

    Always 200 for a known field, valid or not; 404 for an unknown one.
    """
    validator = VALIDATORS.get(field)
    if validator is None:
        raise HTTPException(status_code=404, detail=f"Unknown field: {field}")
    return validator(request.value or "")
