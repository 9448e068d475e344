from __future__ import annotations

from typing import List, Optional

from egress.datasets.schema import (
    MinExitsEntry,
    MinWidthEntry,
    OccupantLoadEntry,
    OrdinanceDataset,
    TravelDistanceEntry,
)

RETAIL_CLASS = "Ф3.1"
GROUND_FLOOR_MARKER = "кота терен"
ABOVE_GROUND_MARKER = "извън"

TRAVEL_CONTEXTS = {
    "room": "Вътре в помещение",
    "corridor": "До стълбище/защитена зона",
}

# чл. 41, ал. 4: exit width per 100 people
WIDTH_PER_100 = {
    "ground": 0.6,
    "above": 0.8,
    "underground": 1.2,
}
DEFAULT_DOOR_WIDTH_M = 0.9


def get_functional_class_group(functional_class: str) -> str:
    return functional_class[:2]


def is_industrial_class(functional_class: str) -> bool:
    return functional_class.startswith("Ф5")


def lookup_occupant_load_factor(
    table: List[OccupantLoadEntry],
    functional_class: str,
    space_type: Optional[str] = None,
    is_ground_floor: Optional[bool] = None,
) -> Optional[OccupantLoadEntry]:
    """Find the Table 8 row giving area per person for a space.

    Order: space type substring within the class, retail ground/above-ground
    split, first row of the class, general office row.
    """
    if space_type:
        needle = space_type.lower()
        for entry in table:
            if entry.functional_class == functional_class and needle in entry.space_type.lower():
                return entry

    if functional_class == RETAIL_CLASS:
        entries = [e for e in table if e.functional_class == RETAIL_CLASS]
        if is_ground_floor is not None:
            marker = GROUND_FLOOR_MARKER if is_ground_floor else ABOVE_GROUND_MARKER
            match = next((e for e in entries if marker in e.space_type), None)
            if match:
                return match
        ground = next((e for e in entries if GROUND_FLOOR_MARKER in e.space_type), None)
        return ground or (entries[0] if entries else None)

    class_match = next((e for e in table if e.functional_class == functional_class), None)
    if class_match:
        return class_match

    return next(
        (e for e in table if e.functional_class == "general" and "офис" in e.space_type.lower()),
        None,
    )


def lookup_min_exits(
    table: List[MinExitsEntry],
    functional_class: str,
    occupants: int,
    area_m2: float,
    is_underground: bool,
    fire_hazard_category: Optional[str] = None,
) -> Optional[MinExitsEntry]:
    industrial = is_industrial_class(functional_class)

    def applies(entry: MinExitsEntry) -> bool:
        if industrial:
            if entry.functional_class_group != "Ф5":
                return False
            if entry.category and fire_hazard_category and entry.category != fire_hazard_category:
                return False
        elif entry.functional_class_group != "Ф1-Ф4":
            return False
        if entry.underground_only and not is_underground:
            return False
        if occupants < entry.min_occupants:
            return False
        if entry.max_occupants is not None and occupants > entry.max_occupants:
            return False
        if entry.max_area_m2 is not None and area_m2 > entry.max_area_m2:
            return False
        return True

    relevant = [e for e in table if applies(e)]
    if not relevant:
        return None
    # min() keeps the first of equal candidates
    return min(relevant, key=lambda e: e.min_exits)


def lookup_max_travel_distance(
    table: List[TravelDistanceEntry],
    evacuation_type: str,
    context: str = "room",
    fire_hazard_category: Optional[str] = None,
    is_single_storey: bool = False,
    has_sprinklers: bool = False,
    has_fire_alarm: bool = False,
) -> Optional[TravelDistanceEntry]:
    rows = [e for e in table if e.evacuation_type == evacuation_type]

    if fire_hazard_category in ("Ф5Г", "Ф5Д") and is_single_storey:
        special = next((e for e in rows if "Ф5Г/Ф5Д" in e.context and "едноетажна" in e.context), None)
        if special:
            return special

    if fire_hazard_category == "Ф5В" and has_sprinklers and has_fire_alarm:
        special = next((e for e in rows if "Ф5В" in e.context and "ПГИ" in e.context), None)
        if special:
            return special

    wanted = TRAVEL_CONTEXTS.get(context)
    return next((e for e in rows if e.context == wanted), None)


def lookup_min_width(
    table: List[MinWidthEntry],
    element_type: str,
    occupants: int,
    is_underground: bool = False,
) -> Optional[MinWidthEntry]:
    entries = [e for e in table if e.element_type == element_type]
    if not entries:
        return None

    def first_with(*markers: str) -> Optional[MinWidthEntry]:
        return next((e for e in entries if any(m in e.context for m in markers)), None)

    if element_type == "corridor" or (element_type == "stair" and occupants > 200):
        marker = "подземни" if is_underground else "надземни"
        match = next((e for e in entries if marker in e.context.lower()), None)
        return match or entries[0]

    if element_type == "exit_door":
        if occupants <= 15:
            return first_with("15")
        if occupants <= 50:
            return first_with("16-50", "50")
        if occupants <= 200:
            return first_with("200")
        return first_with("Над 200")

    if element_type == "spiral_stair":
        if occupants <= 50:
            return first_with("16-50")
        # The "16-50" band also reads "50 човека"; prefer the explicit upper band.
        upper = first_with("Над 50")
        if upper:
            return upper
        return next((e for e in entries if "50 човека" in e.context and "16-50" not in e.context), None)

    return entries[0]


def calculate_min_total_width(table: List[MinWidthEntry], occupants: int, floor_type: str) -> float:
    """Minimum total exit width in metres for ``floor_type`` ground/above/underground."""
    if occupants <= 200:
        entry = lookup_min_width(table, "exit_door", occupants, floor_type == "underground")
        if entry is None or entry.min_width_m is None:
            return DEFAULT_DOOR_WIDTH_M
        return entry.min_width_m
    return (occupants / 100) * WIDTH_PER_100[floor_type]


def get_functional_class_name(dataset: OrdinanceDataset, code: str) -> str:
    entry = next((fc for fc in dataset.tables.functional_classes if fc.code == code), None)
    return entry.name if entry else code


def get_height_category(dataset: OrdinanceDataset, height_m: float) -> str:
    for cat in dataset.tables.height_categories:
        min_ok = cat.min_height_m is None or height_m >= cat.min_height_m
        max_ok = cat.max_height_m is None or height_m < cat.max_height_m
        if min_ok and max_ok:
            return cat.code
    return "МВ"
