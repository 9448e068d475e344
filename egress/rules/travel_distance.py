from __future__ import annotations

from typing import List, Optional

from egress.models.schema import (
    EvacuationType,
    EvaluationContext,
    Finding,
    FindingScope,
    FindingSeverity,
    FindingStatus,
    Route,
    Space,
)
from egress.rules.findings import cite, num, outcome
from egress.rules.lookup import lookup_max_travel_distance

DEFAULT_DEAD_END_M = 20.0
DEFAULT_DEAD_END_REF = cite("чл. 40, ал. 3")
DEFAULT_DEAD_END_CONTEXT = "Вътрешно помещение"


def _source_space(route: Route, ctx: EvaluationContext) -> Optional[Space]:
    return next((sp for sp in ctx.project.spaces if sp.id == route.from_space_id), None)


def _subject_name(route: Route, space: Optional[Space]) -> str:
    if route.name:
        return route.name
    return f"Маршрут от {space.name if space else route.from_space_id}"


def _direction_text(evacuation_type: str) -> str:
    if evacuation_type == EvacuationType.SINGLE_DIRECTION:
        return "в една посока"
    return "в две или повече посоки"


def _evaluate_route_distance(route: Route, ctx: EvaluationContext) -> Finding:
    building = ctx.project.building
    space = _source_space(route, ctx)

    entry = lookup_max_travel_distance(
        ctx.dataset.tables.max_travel_distance,
        route.evacuation_type,
        "room",
        space.fire_hazard_category if space else None,
        is_single_storey=building.is_single_storey,
        has_sprinklers=building.has_sprinklers,
        has_fire_alarm=building.has_fire_alarm,
    )
    if entry is None:
        return Finding(
            rule_id="EGR-TRAVEL-001",
            status=FindingStatus.REVIEW,
            severity=FindingSeverity.WARNING,
            scope=FindingScope.ROUTE,
            subject_id=route.id,
            subject_name=route.name or f"Маршрут {route.id}",
            measured=route.length_m,
            required=None,
            explanation=(
                f"Не е намерено изискване за максимална дължина на евакуационен път "
                f'от тип "{route.evacuation_type}".'
            ),
            legal_reference=cite("чл. 44"),
            details={
                "from_space_id": route.from_space_id,
                "to_exit_id": route.to_exit_id,
                "evacuation_type": route.evacuation_type,
            },
        )

    status, severity = outcome(route.length_m <= entry.max_distance_m)
    direction = _direction_text(route.evacuation_type)
    if status == FindingStatus.PASS:
        explanation = (
            f"Дължина на евакуационния път ({num(route.length_m)} m) е в рамките на допустимата "
            f"({num(entry.max_distance_m)} m) за евакуация {direction}."
        )
    else:
        explanation = (
            f"Превишена допустима дължина на евакуационния път. Измерена: {num(route.length_m)} m, "
            f"Допустима: {num(entry.max_distance_m)} m за евакуация {direction}."
        )
    return Finding(
        rule_id="EGR-TRAVEL-001",
        status=status,
        severity=severity,
        scope=FindingScope.ROUTE,
        subject_id=route.id,
        subject_name=_subject_name(route, space),
        measured=route.length_m,
        required=entry.max_distance_m,
        explanation=explanation,
        legal_reference=entry.article_ref,
        details={
            "from_space": space.name if space else None,
            "evacuation_type": route.evacuation_type,
            "context": entry.context,
            "conditions": entry.conditions,
        },
    )


def _evaluate_dead_end(route: Route, ctx: EvaluationContext) -> Optional[Finding]:
    if not route.has_dead_end or route.dead_end_length_m is None:
        return None

    space = _source_space(route, ctx)
    hazard = space.fire_hazard_category if space else None
    limits = ctx.dataset.tables.dead_end_limits

    if hazard in ("Ф5Г", "Ф5Д"):
        entry = next((e for e in limits if "Ф5Г/Ф5Д" in e.context), None)
    else:
        entry = next(
            (e for e in limits if "съседни помещения Ф5В" in e.context or "Ф1-Ф4" in e.context),
            None,
        )

    if entry:
        max_dead_end, article_ref, context = entry.max_distance_m, entry.article_ref, entry.context
    else:
        max_dead_end, article_ref, context = DEFAULT_DEAD_END_M, DEFAULT_DEAD_END_REF, DEFAULT_DEAD_END_CONTEXT

    length = route.dead_end_length_m
    status, severity = outcome(length <= max_dead_end)
    if status == FindingStatus.PASS:
        explanation = (
            f"Дължина на задънен коридор ({num(length)} m) е в рамките на допустимата ({num(max_dead_end)} m)."
        )
    else:
        explanation = (
            f"Превишена допустима дължина на задънен коридор. Измерена: {num(length)} m, "
            f"Допустима: {num(max_dead_end)} m."
        )
    return Finding(
        rule_id="EGR-TRAVEL-002",
        status=status,
        severity=severity,
        scope=FindingScope.ROUTE,
        subject_id=route.id,
        subject_name=_subject_name(route, space),
        measured=length,
        required=max_dead_end,
        explanation=explanation,
        legal_reference=article_ref,
        details={
            "context": context,
            "from_space": space.name if space else None,
            "fire_hazard_category": hazard,
        },
    )


def evaluate_travel_distance(ctx: EvaluationContext) -> List[Finding]:
    findings: List[Finding] = []
    for route in ctx.project.routes:
        findings.append(_evaluate_route_distance(route, ctx))
        dead_end = _evaluate_dead_end(route, ctx)
        if dead_end is not None:
            findings.append(dead_end)
    return findings
