"""Pydantic schemas for configuration input and API responses."""
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .models import (
    Assignment, DayGroup, GroupSettings, PolicyOptions, Pools, TeacherConstraint,
    WeekConfig, parse_unavailable,
)


class TeacherConstraintSchema(BaseModel):
    unavailable: List[str] = []     # "Tue|4", "Mon|EXAM"
    homeroom_disabled: bool = False
    max_homerooms: Optional[int] = None

    @field_validator("unavailable")
    @classmethod
    def check_tokens(cls, value: List[str]) -> List[str]:
        for token in value:
            parse_unavailable(token)
        return value

    def to_constraint(self) -> TeacherConstraint:
        return TeacherConstraint(
            unavailable=frozenset(parse_unavailable(t) for t in self.unavailable),
            homeroom_disabled=self.homeroom_disabled,
            max_homerooms=self.max_homerooms,
        )


class PoolsSchema(BaseModel):
    local: List[str] = []
    foreign: List[str] = []


class GroupSettingsSchema(BaseModel):
    round_class_counts: Dict[int, int] = {}
    fixed_homerooms: Dict[str, str] = {}   # class id -> teacher

    def to_settings(self) -> GroupSettings:
        return GroupSettings(
            round_class_counts=dict(self.round_class_counts),
            fixed_homerooms={k.strip(): v.strip() for k, v in self.fixed_homerooms.items()},
        )


class PolicyOptionsSchema(BaseModel):
    include_h_in_k: bool = True
    prefer_other_h_for_k: bool = True
    disallow_own_h_as_k: bool = False


class WeekConfigSchema(BaseModel):
    pools: PoolsSchema
    constraints: Dict[str, TeacherConstraintSchema] = {}
    group_a: GroupSettingsSchema = GroupSettingsSchema()
    group_b: GroupSettingsSchema = GroupSettingsSchema()
    options: PolicyOptionsSchema = PolicyOptionsSchema()

    def to_config(self) -> WeekConfig:
        return WeekConfig(
            pools=Pools(
                local=[p.strip() for p in self.pools.local],
                foreign=[p.strip() for p in self.pools.foreign],
            ),
            constraints={name.strip(): c.to_constraint() for name, c in self.constraints.items()},
            groups={
                DayGroup.A: self.group_a.to_settings(),
                DayGroup.B: self.group_b.to_settings(),
            },
            options=PolicyOptions(**self.options.model_dump()),
        )


def load_config(data: Mapping[str, Any]) -> WeekConfig:
    """Validate a JSON-like mapping and build a WeekConfig."""
    try:
        return WeekConfigSchema.model_validate(data).to_config()
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        raise ConfigError(problems) from exc


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------

class AssignmentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: str
    class_id: str = Field(alias="classId")
    round: int
    period: int
    time: str = ""
    role: str
    teacher: str
    seat: str = "real"
    exam_slot: Optional[str] = Field(default=None, alias="examSlot")

    def to_assignment(self) -> Assignment:
        return Assignment.from_dict(self.model_dump(by_alias=True))


class ValidationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    errors: List[str] = []
    warnings: List[str] = []
    infos: List[str] = []


class GenerateScheduleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: int
    assignments: List[AssignmentOut]
    homerooms: Dict[str, Dict[str, str]]
    warnings: List[str]
    infos: List[str] = []
    feasibility: Dict[str, Any]
    fairness: Dict[str, Any]
    metrics: Dict[str, Any]
    validation: ValidationResponse
    round_stats: List[Dict[str, Any]] = Field(default_factory=list, alias="roundStats")
    consistency: Dict[str, float] = {}


class ValidateScheduleRequest(BaseModel):
    config: WeekConfigSchema
    assignments: List[AssignmentOut]
    homerooms: Optional[Dict[str, Dict[str, str]]] = None


class FeasibilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    items: List[Dict[str, Any]]
    r1_foreign_ok: bool = Field(alias="r1ForeignOk")
    r1_foreign_demand: int = Field(alias="r1ForeignDemand")
    r1_foreign_capacity: int = Field(alias="r1ForeignCapacity")
    r2_h_needed: int = Field(alias="r2HNeeded")
    r2_k_needed: int = Field(alias="r2KNeeded")
