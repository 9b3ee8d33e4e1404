from fastapi import APIRouter, HTTPException

from timetabler.composer import generate_week, homerooms_from_document
from timetabler.exceptions import ConfigError
from timetabler.feasibility import analyze_feasibility
from timetabler.schemas import (
    FeasibilityResponse, GenerateScheduleResponse, ValidateScheduleRequest,
    ValidationResponse, WeekConfigSchema,
)
from timetabler.validate import check_config, validate_assignments

router = APIRouter()


@router.post("/generate", response_model=GenerateScheduleResponse)
def generate(payload: WeekConfigSchema):
    """Generate one week from the posted configuration."""
    config = payload.to_config()
    try:
        result = generate_week(config)
    except ConfigError as exc:
        raise HTTPException(422, {"problems": exc.problems})
    return GenerateScheduleResponse.model_validate(result.to_document())


@router.post("/feasibility", response_model=FeasibilityResponse)
def feasibility(payload: WeekConfigSchema):
    config = payload.to_config()
    problems = check_config(config)
    if problems:
        raise HTTPException(422, {"problems": problems})
    return FeasibilityResponse.model_validate(analyze_feasibility(config).to_dict())


@router.post("/validate", response_model=ValidationResponse)
def validate(payload: ValidateScheduleRequest):
    """Re-validate an edited week against its configuration."""
    config = payload.config.to_config()
    problems = check_config(config)
    if problems:
        raise HTTPException(422, {"problems": problems})
    try:
        assignments = [a.to_assignment() for a in payload.assignments]
        homerooms = homerooms_from_document({"homerooms": payload.homerooms or {}})
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    report = validate_assignments(assignments, config, homerooms or None)
    return ValidationResponse.model_validate(report.to_dict())
