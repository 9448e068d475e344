from conftest import make_building, make_route, make_space
from egress.models.schema import FindingSeverity, FindingStatus
from egress.rules.travel_distance import DEFAULT_DEAD_END_M, evaluate_travel_distance


def by_rule(findings, rule_id):
    return [f for f in findings if f.rule_id == rule_id]


def test_long_single_direction_route_fails(ctx_for):
    ctx = ctx_for(routes=[make_route(length_m=100)])
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-001")
    assert finding.status == FindingStatus.FAIL
    assert finding.severity == FindingSeverity.BLOCKER
    assert finding.measured == 100
    assert finding.required == 20


def test_short_route_passes(ctx_for):
    ctx = ctx_for(routes=[make_route(length_m=15)])
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-001")
    assert finding.status == FindingStatus.PASS
    assert finding.severity == FindingSeverity.INFO
    assert finding.subject_name == "Маршрут от Test Space"


def test_multiple_directions_allow_longer_routes(ctx_for):
    ctx = ctx_for(routes=[make_route(length_m=35, evacuation_type="multiple_directions")])
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-001")
    assert finding.status == FindingStatus.PASS
    assert finding.required == 40


def test_named_route_keeps_its_name(ctx_for):
    ctx = ctx_for(routes=[make_route(name="Eastern corridor")])
    (finding,) = evaluate_travel_distance(ctx)
    assert finding.subject_name == "Eastern corridor"


def test_single_storey_f5g_limit(ctx_for):
    ctx = ctx_for(
        building=make_building(functional_class="Ф5.2", is_single_storey=True),
        spaces=[make_space(purpose="Storage", fire_hazard_category="Ф5Г")],
        routes=[make_route(length_m=45)],
    )
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-001")
    assert finding.status == FindingStatus.PASS
    assert finding.required == 50


def test_missing_travel_row_is_review(ctx_for, dataset):
    tables = dataset.tables.model_copy(update={"max_travel_distance": []})
    ctx = ctx_for(routes=[make_route()])
    ctx = ctx.model_copy(update={"dataset": dataset.model_copy(update={"tables": tables})})
    (finding,) = evaluate_travel_distance(ctx)
    assert finding.status == FindingStatus.REVIEW
    assert finding.severity == FindingSeverity.WARNING
    assert finding.required is None


def test_no_dead_end_finding_without_dead_end(ctx_for):
    ctx = ctx_for(routes=[make_route(has_dead_end=False, dead_end_length_m=30)])
    assert by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-002") == []


def test_no_dead_end_finding_without_length(ctx_for):
    ctx = ctx_for(routes=[make_route(has_dead_end=True)])
    assert by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-002") == []


def test_dead_end_over_limit_fails(ctx_for):
    ctx = ctx_for(routes=[make_route(has_dead_end=True, dead_end_length_m=25)])
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-002")
    assert finding.status == FindingStatus.FAIL
    assert finding.severity == FindingSeverity.BLOCKER
    assert finding.required == 20


def test_f5g_dead_end_allows_more(ctx_for):
    ctx = ctx_for(
        building=make_building(functional_class="Ф5.1"),
        spaces=[make_space(fire_hazard_category="Ф5Г")],
        routes=[make_route(has_dead_end=True, dead_end_length_m=25)],
    )
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-002")
    assert finding.status == FindingStatus.PASS
    assert finding.required > DEFAULT_DEAD_END_M


def test_dead_end_default_when_table_empty(ctx_for, dataset):
    tables = dataset.tables.model_copy(update={"dead_end_limits": []})
    ctx = ctx_for(routes=[make_route(has_dead_end=True, dead_end_length_m=10)])
    ctx = ctx.model_copy(update={"dataset": dataset.model_copy(update={"tables": tables})})
    (finding,) = by_rule(evaluate_travel_distance(ctx), "EGR-TRAVEL-002")
    assert finding.status == FindingStatus.PASS
    assert finding.required == DEFAULT_DEAD_END_M
    assert finding.legal_reference.endswith("чл. 40, ал. 3")
