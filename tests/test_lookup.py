import pytest

from egress.rules.lookup import (
    calculate_min_total_width,
    get_functional_class_group,
    get_functional_class_name,
    get_height_category,
    is_industrial_class,
    lookup_max_travel_distance,
    lookup_min_exits,
    lookup_min_width,
    lookup_occupant_load_factor,
)


def test_functional_class_group():
    assert get_functional_class_group("Ф1.1") == "Ф1"
    assert get_functional_class_group("Ф3.1") == "Ф3"
    assert get_functional_class_group("Ф5.3") == "Ф5"


def test_industrial_class():
    assert is_industrial_class("Ф5.1")
    assert is_industrial_class("Ф5.3")
    assert not is_industrial_class("Ф4.1")
    assert not is_industrial_class("Ф1.1")


def test_retail_ground_and_upper_floor(dataset):
    table = dataset.tables.occupant_load_table_8
    assert lookup_occupant_load_factor(table, "Ф3.1", None, True).area_per_person_m2 == 2.0
    assert lookup_occupant_load_factor(table, "Ф3.1", None, False).area_per_person_m2 == 3.0
    # no floor information: ground-floor row
    assert lookup_occupant_load_factor(table, "Ф3.1").area_per_person_m2 == 2.0


def test_space_type_substring_wins(dataset):
    table = dataset.tables.occupant_load_table_8
    entry = lookup_occupant_load_factor(table, "Ф2.1", "зрители")
    assert entry.area_per_person_m2 == 0.5


def test_class_and_general_fallback(dataset):
    table = dataset.tables.occupant_load_table_8
    assert lookup_occupant_load_factor(table, "Ф2.1").area_per_person_m2 == 1.35
    assert lookup_occupant_load_factor(table, "Ф3.2").area_per_person_m2 == 1.0
    general = lookup_occupant_load_factor(table, "Ф1.3")
    assert general.functional_class == "general"
    assert general.area_per_person_m2 == 5.0


def test_occupant_load_miss_without_general_row(dataset):
    table = [e for e in dataset.tables.occupant_load_table_8 if e.functional_class != "general"]
    assert lookup_occupant_load_factor(table, "Ф1.3") is None


@pytest.mark.parametrize("occupants,expected", [(30, 1), (200, 2), (700, 3), (1500, 4)])
def test_min_exits_bands(dataset, occupants, expected):
    entry = lookup_min_exits(dataset.tables.min_exits_by_occupants, "Ф4.1", occupants, 500, False)
    assert entry.min_exits == expected


def test_min_exits_industrial_category(dataset):
    table = dataset.tables.min_exits_by_occupants
    small = lookup_min_exits(table, "Ф5.1", 4, 80, False, "Ф5А")
    assert small.min_exits == 1
    large = lookup_min_exits(table, "Ф5.1", 40, 800, False, "Ф5А")
    assert large.min_exits == 2


def test_min_exits_miss(dataset):
    rows = [e for e in dataset.tables.min_exits_by_occupants if e.functional_class_group == "Ф5"]
    assert lookup_min_exits(rows, "Ф4.1", 10, 50, False) is None


def test_travel_distance_defaults(dataset):
    table = dataset.tables.max_travel_distance
    single = lookup_max_travel_distance(table, "single_direction")
    multiple = lookup_max_travel_distance(table, "multiple_directions")
    assert single.max_distance_m == 20
    assert multiple.max_distance_m >= single.max_distance_m
    assert lookup_max_travel_distance(table, "single_direction", "corridor").max_distance_m == 25


def test_travel_distance_special_cases(dataset):
    table = dataset.tables.max_travel_distance
    f5g = lookup_max_travel_distance(table, "single_direction", "room", "Ф5Г", is_single_storey=True)
    assert f5g.max_distance_m == 50
    f5v = lookup_max_travel_distance(
        table, "multiple_directions", "room", "Ф5В", has_sprinklers=True, has_fire_alarm=True
    )
    assert f5v.max_distance_m == 60
    # sprinklers alone are not enough
    plain = lookup_max_travel_distance(table, "single_direction", "room", "Ф5В", has_sprinklers=True)
    assert plain.max_distance_m == 20


def test_exit_door_widths(dataset):
    table = dataset.tables.min_widths
    assert lookup_min_width(table, "exit_door", 10).min_width_m is None
    assert lookup_min_width(table, "exit_door", 40).min_width_m == 0.9
    assert lookup_min_width(table, "exit_door", 120).min_width_m == 1.2
    assert "Над 200" in lookup_min_width(table, "exit_door", 300).context


def test_corridor_and_large_stair_widths(dataset):
    table = dataset.tables.min_widths
    assert "надземни" in lookup_min_width(table, "corridor", 100).context
    assert "подземни" in lookup_min_width(table, "corridor", 100, True).context
    assert lookup_min_width(table, "stair", 300, True).width_per_100_people_m == 1.2


def test_spiral_stair_widths(dataset):
    table = dataset.tables.min_widths
    assert lookup_min_width(table, "spiral_stair", 30).min_width_m == 1.2
    # over 50 people resolves to the upper band, never the 16-50 row
    assert lookup_min_width(table, "spiral_stair", 80).min_width_m == 1.5


def test_unknown_element_type(dataset):
    assert lookup_min_width(dataset.tables.min_widths, "ramp", 10) is None


def test_min_total_width(dataset):
    table = dataset.tables.min_widths
    assert calculate_min_total_width(table, 100, "ground") >= 0.9
    assert calculate_min_total_width(table, 10, "ground") == 0.9
    assert calculate_min_total_width(table, 500, "above") == pytest.approx(4.0)
    assert calculate_min_total_width(table, 500, "underground") > calculate_min_total_width(table, 500, "ground")


def test_functional_class_name(dataset):
    assert get_functional_class_name(dataset, "Ф3.1") == "Търговски сгради"
    assert get_functional_class_name(dataset, "Ф9.9") == "Ф9.9"


@pytest.mark.parametrize("height,code", [(5, "Н"), (10, "НН"), (20, "СВ"), (50, "В"), (120, "МВ")])
def test_height_category(dataset, height, code):
    assert get_height_category(dataset, height) == code
