from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, List, Mapping, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, PositiveInt

from egress.datasets.schema import OrdinanceDataset


# ----- Enumerations -----
class FindingStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    REVIEW = "REVIEW"


class FindingSeverity(str, Enum):
    BLOCKER = "BLOCKER"
    WARNING = "WARNING"
    INFO = "INFO"


class FindingScope(str, Enum):
    BUILDING = "building"
    STOREY = "storey"
    SPACE = "space"
    ROUTE = "route"
    EXIT = "exit"
    STAIR = "stair"


class HeightCategory(str, Enum):
    LOW = "Н"
    MEDIUM_LOW = "НН"
    MEDIUM = "СВ"
    HIGH = "В"
    VERY_HIGH = "МВ"


class FunctionalClass(str, Enum):
    F1_1 = "Ф1.1"
    F1_2 = "Ф1.2"
    F1_3 = "Ф1.3"
    F1_4 = "Ф1.4"
    F2_1 = "Ф2.1"
    F2_2 = "Ф2.2"
    F2_3 = "Ф2.3"
    F2_4 = "Ф2.4"
    F3_1 = "Ф3.1"
    F3_2 = "Ф3.2"
    F3_3 = "Ф3.3"
    F3_4 = "Ф3.4"
    F3_5 = "Ф3.5"
    F4_1 = "Ф4.1"
    F4_2 = "Ф4.2"
    F4_3 = "Ф4.3"
    F4_4 = "Ф4.4"
    F5_1 = "Ф5.1"
    F5_2 = "Ф5.2"
    F5_3 = "Ф5.3"


class FireHazardCategory(str, Enum):
    F5A = "Ф5А"
    F5B = "Ф5Б"
    F5V = "Ф5В"
    F5G = "Ф5Г"
    F5D = "Ф5Д"


class FireResistanceRating(str, Enum):
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"


class StairType(str, Enum):
    ENCLOSED = "enclosed"
    OPEN = "open"
    EXTERNAL = "external"
    SMOKE_PROTECTED = "smoke_protected"
    SPIRAL = "spiral"


class ExitType(str, Enum):
    DOOR = "door"
    STAIR = "stair"
    EXTERNAL = "external"
    CORRIDOR = "corridor"
    INTERNAL = "internal"


class EvacuationType(str, Enum):
    SINGLE_DIRECTION = "single_direction"
    MULTIPLE_DIRECTIONS = "multiple_directions"


class OccupantSource(str, Enum):
    CALCULATED = "calculated"
    OVERRIDE = "override"


# ----- Project input -----
class _Input(BaseModel):
    model_config = ConfigDict(use_enum_values=True)


class Building(_Input):
    name: str = Field(..., min_length=1)
    height_m: Optional[float] = Field(None, gt=0)
    height_category: HeightCategory
    functional_class: FunctionalClass
    fire_resistance_rating: Optional[FireResistanceRating] = None
    has_sprinklers: bool = False
    has_smoke_control: bool = False
    has_fire_alarm: bool = False
    is_single_storey: bool = False


class Space(_Input):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    purpose: str = Field(..., min_length=1, description="Free-text use, matched against Table 8 space types")
    floor: int = Field(0, description="0 = ground floor, negative = below ground")
    area_m2: float = Field(..., gt=0)
    is_underground: bool = False
    fire_hazard_category: Optional[FireHazardCategory] = None
    occupants_override: Optional[PositiveInt] = None


class Exit(_Input):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: ExitType = ExitType.DOOR
    width_m: float = Field(..., gt=0)
    serves_space_ids: List[str] = Field(..., min_length=1)
    serves_floors: List[int] = Field(default_factory=list)
    has_panic_hardware: bool = False


class Route(_Input):
    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    from_space_id: str = Field(..., min_length=1)
    to_exit_id: str = Field(..., min_length=1)
    length_m: float = Field(..., gt=0)
    has_dead_end: bool = False
    dead_end_length_m: Optional[float] = Field(None, ge=0)
    evacuation_type: EvacuationType


class Stair(_Input):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: StairType
    width_m: float = Field(..., gt=0)
    serves_floors: List[int] = Field(..., min_length=1)
    step_width_m: Optional[float] = Field(None, gt=0)
    step_height_m: Optional[float] = Field(None, gt=0)
    is_naturally_lit: bool = False
    has_smoke_vent: bool = False


class Project(_Input):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    building: Building
    spaces: List[Space] = Field(default_factory=list)
    routes: List[Route] = Field(default_factory=list)
    exits: List[Exit] = Field(default_factory=list)
    stairs: List[Stair] = Field(default_factory=list)


class ComputedSpace(Space):
    computed_occupants: int
    occupant_source: OccupantSource
    area_per_person_m2: Optional[float] = None


class EvaluationContext(BaseModel):
    """Project plus the dataset it is checked against.

    Both are optional so that ``validate_context`` can report their absence;
    ``evaluate`` expects both to be present.
    """

    project: Optional[Project] = None
    dataset: Optional[OrdinanceDataset] = None


# ----- Evaluation output -----
def _freeze(details: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(details))


def _thaw(details: Mapping[str, Any]) -> dict:
    return dict(details)


# Read-only on the model, a plain dict when dumped.
FrozenDetails = Annotated[Mapping[str, Any], AfterValidator(_freeze), PlainSerializer(_thaw)]


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(..., description="Stable rule identifier, e.g. 'EGR-TRAVEL-001'")
    status: FindingStatus
    severity: FindingSeverity
    scope: FindingScope
    subject_id: str
    subject_name: Optional[str] = None
    measured: Optional[float] = None
    required: Optional[float] = None
    explanation: str
    legal_reference: str
    details: FrozenDetails = Field(default_factory=dict, validate_default=True)


class EvaluationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_rules: int
    passed: int
    failed: int
    review: int
    blockers: int


class EvaluationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
    evaluated_at: str
    dataset_version: str
    summary: EvaluationSummary
    findings: Tuple[Finding, ...] = ()


class ValidationOutcome(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
