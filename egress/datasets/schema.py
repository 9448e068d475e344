from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# Row models mirror the tables of Наредба № Iз-1971 as published in the dataset JSON.
class OccupantLoadEntry(BaseModel):
    id: int
    functional_class: str
    space_type: str
    space_type_en: str = ""
    area_per_person_m2: float = Field(..., gt=0)
    notes: Optional[str] = None
    article_ref: str


class MinExitsEntry(BaseModel):
    functional_class_group: str = Field(..., description="'Ф1-Ф4' or 'Ф5'")
    category: Optional[str] = Field(None, description="Fire hazard category for Ф5 rows")
    min_occupants: int = 0
    max_occupants: Optional[int] = None
    max_area_m2: Optional[float] = None
    underground_only: bool = False
    min_exits: int
    min_width_m: Optional[float] = None
    notes: Optional[str] = None
    article_ref: str


class TravelDistanceEntry(BaseModel):
    id: int
    context: str
    evacuation_type: str
    max_distance_m: float
    conditions: Optional[str] = None
    article_ref: str


class DeadEndEntry(BaseModel):
    id: int
    context: str
    max_distance_m: float
    requires_two_exits: bool = False
    additional_conditions: Optional[str] = None
    article_ref: str


class MinWidthEntry(BaseModel):
    element_type: str
    context: str
    min_width_m: Optional[float] = None
    max_width_m: Optional[float] = None
    width_per_100_people_m: Optional[float] = None
    min_step_width_m: Optional[float] = None
    max_height_m: Optional[float] = None
    min_inner_diameter_m: Optional[float] = None
    notes: Optional[str] = None
    article_ref: str


class FunctionalClassInfo(BaseModel):
    code: str
    name: str
    name_en: str = ""


class FireHazardCategoryInfo(BaseModel):
    code: str
    name: str
    name_en: str = ""


class HeightCategoryInfo(BaseModel):
    code: str
    name: str
    min_height_m: Optional[float] = None
    max_height_m: Optional[float] = None
    description: str = ""


class DatasetMeta(BaseModel):
    ordinance: str
    version: str
    effective_from: str = ""
    source: str = ""
    last_updated: str = ""
    notes: str = ""


class DatasetTables(BaseModel):
    occupant_load_table_8: List[OccupantLoadEntry]
    min_exits_by_occupants: List[MinExitsEntry]
    max_travel_distance: List[TravelDistanceEntry]
    dead_end_limits: List[DeadEndEntry]
    min_widths: List[MinWidthEntry]
    functional_classes: List[FunctionalClassInfo]
    fire_hazard_categories: List[FireHazardCategoryInfo] = Field(default_factory=list)
    height_categories: List[HeightCategoryInfo] = Field(default_factory=list)


class RuleInfo(BaseModel):
    id: str
    name_bg: str
    description_bg: str = ""
    article_ref: str
    formula: Optional[str] = None
    min_angle_degrees: Optional[float] = None


class OrdinanceDataset(BaseModel):
    meta: DatasetMeta
    tables: DatasetTables
    rules: Dict[str, RuleInfo] = Field(default_factory=dict)
