from __future__ import annotations

from typing import List, Optional

from egress.models.schema import (
    EvaluationContext,
    Finding,
    FindingScope,
    FindingSeverity,
    FindingStatus,
    Stair,
    StairType,
)
from egress.rules.findings import cite, num, outcome
from egress.rules.occupant_load import calculate_occupant_load

MIN_STAIR_WIDTH_M = 0.9
MAX_STAIR_WIDTH_M = 2.4  # wider flights need intermediate handrails
SPIRAL_SMALL_WIDTH_M = 1.2
SPIRAL_LARGE_WIDTH_M = 1.5
SPIRAL_OCCUPANT_LIMIT = 50
LARGE_OCCUPANCY = 200
WIDTH_PER_100_ABOVE_M = 0.8
WIDTH_PER_100_UNDERGROUND_M = 1.2

MIN_STEP_WIDTH_M = 0.25
MIN_SPIRAL_STEP_WIDTH_M = 0.23  # measured 0.30 m from the inner edge
MAX_STEP_HEIGHT_M = 0.22
MAX_EXTERNAL_STEP_HEIGHT_M = 0.25
UNLIT_FLOOR_LIMIT = 3


def occupants_served(stair: Stair, ctx: EvaluationContext) -> int:
    return sum(
        calculate_occupant_load(sp, ctx).computed_occupants
        for sp in ctx.project.spaces
        if sp.floor in stair.serves_floors
    )


def _evaluate_width(stair: Stair, ctx: EvaluationContext) -> List[Finding]:
    out: List[Finding] = []
    total = occupants_served(stair, ctx)

    min_width = MIN_STAIR_WIDTH_M
    article_ref = cite("чл. 45")
    if stair.type == StairType.SPIRAL:
        if total <= SPIRAL_OCCUPANT_LIMIT:
            min_width, article_ref = SPIRAL_SMALL_WIDTH_M, cite("чл. 52, ал. 1")
        else:
            min_width, article_ref = SPIRAL_LARGE_WIDTH_M, cite("чл. 52, ал. 2")
    elif total > LARGE_OCCUPANCY:
        underground = any(
            sp.is_underground for sp in ctx.project.spaces if sp.floor in stair.serves_floors
        )
        per_100 = WIDTH_PER_100_UNDERGROUND_M if underground else WIDTH_PER_100_ABOVE_M
        min_width = max(MIN_STAIR_WIDTH_M, total / 100 * per_100)
        article_ref = cite("чл. 45, ал. 1, т. 2" if underground else "чл. 45, ал. 1, т. 1")

    status, severity = outcome(stair.width_m >= min_width)
    if status == FindingStatus.PASS:
        explanation = (
            f"Широчина на стълбищното рамо ({num(stair.width_m)} m) отговаря на изискването "
            f"(мин. {min_width:.2f} m) за {total} човека."
        )
    else:
        explanation = (
            f"Недостатъчна широчина на стълбищното рамо. Измерена: {num(stair.width_m)} m, "
            f"Изискване: мин. {min_width:.2f} m за {total} човека."
        )
    out.append(
        Finding(
            rule_id="EGR-STAIR-001",
            status=status,
            severity=severity,
            scope=FindingScope.STAIR,
            subject_id=stair.id,
            subject_name=stair.name,
            measured=stair.width_m,
            required=round(min_width, 2),
            explanation=explanation,
            legal_reference=article_ref,
            details={
                "total_occupants": total,
                "stair_type": stair.type,
                "serves_floors": tuple(stair.serves_floors),
            },
        )
    )

    if stair.width_m > MAX_STAIR_WIDTH_M:
        out.append(
            Finding(
                rule_id="EGR-STAIR-002",
                status=FindingStatus.REVIEW,
                severity=FindingSeverity.WARNING,
                scope=FindingScope.STAIR,
                subject_id=stair.id,
                subject_name=stair.name,
                measured=stair.width_m,
                required=MAX_STAIR_WIDTH_M,
                explanation=(
                    f"Широчината на стълбищното рамо ({num(stair.width_m)} m) надвишава "
                    f"{num(MAX_STAIR_WIDTH_M)} m. Необходимо е разделяне с парапети."
                ),
                legal_reference=cite("чл. 45, ал. 7"),
                details={"stair_type": stair.type},
            )
        )
    return out


def _evaluate_steps(stair: Stair) -> List[Finding]:
    out: List[Finding] = []

    if stair.step_width_m is not None:
        if stair.type == StairType.SPIRAL:
            min_step, article_ref = MIN_SPIRAL_STEP_WIDTH_M, cite("чл. 52, ал. 1, т. 1")
        else:
            min_step, article_ref = MIN_STEP_WIDTH_M, cite("чл. 47, ал. 4")
        status, severity = outcome(stair.step_width_m >= min_step)
        if status == FindingStatus.PASS:
            explanation = (
                f"Широчина на стъпалото ({num(stair.step_width_m)} m) отговаря на изискването "
                f"(мин. {num(min_step)} m)."
            )
        else:
            explanation = (
                f"Недостатъчна широчина на стъпалото. Измерена: {num(stair.step_width_m)} m, "
                f"Изискване: мин. {num(min_step)} m."
            )
        out.append(
            Finding(
                rule_id="EGR-STAIR-003",
                status=status,
                severity=severity,
                scope=FindingScope.STAIR,
                subject_id=stair.id,
                subject_name=stair.name,
                measured=stair.step_width_m,
                required=min_step,
                explanation=explanation,
                legal_reference=article_ref,
                details={"stair_type": stair.type},
            )
        )

    if stair.step_height_m is not None:
        if stair.type == StairType.EXTERNAL:
            max_height, article_ref = MAX_EXTERNAL_STEP_HEIGHT_M, cite("чл. 51, ал. 2")
        else:
            max_height, article_ref = MAX_STEP_HEIGHT_M, cite("чл. 47, ал. 4")
        status, severity = outcome(stair.step_height_m <= max_height)
        if status == FindingStatus.PASS:
            explanation = (
                f"Височина на стъпалото ({num(stair.step_height_m)} m) отговаря на изискването "
                f"(макс. {num(max_height)} m)."
            )
        else:
            explanation = (
                f"Превишена височина на стъпалото. Измерена: {num(stair.step_height_m)} m, "
                f"Изискване: макс. {num(max_height)} m."
            )
        out.append(
            Finding(
                rule_id="EGR-STAIR-004",
                status=status,
                severity=severity,
                scope=FindingScope.STAIR,
                subject_id=stair.id,
                subject_name=stair.name,
                measured=stair.step_height_m,
                required=max_height,
                explanation=explanation,
                legal_reference=article_ref,
                details={"stair_type": stair.type},
            )
        )
    return out


def _evaluate_lighting(stair: Stair) -> Optional[Finding]:
    if stair.type != StairType.ENCLOSED or len(stair.serves_floors) <= UNLIT_FLOOR_LIMIT:
        return None
    if stair.is_naturally_lit or stair.has_smoke_vent:
        return None
    return Finding(
        rule_id="EGR-STAIR-005",
        status=FindingStatus.FAIL,
        severity=FindingSeverity.BLOCKER,
        scope=FindingScope.STAIR,
        subject_id=stair.id,
        subject_name=stair.name,
        measured=None,
        required=None,
        explanation=(
            f"Вътрешното евакуационно стълбище обслужва повече от три етажа ({len(stair.serves_floors)}) "
            f"и не е осигурено с естествено осветление или димоотвеждане."
        ),
        legal_reference=cite("чл. 50, ал. 2"),
        details={
            "serves_floors": tuple(stair.serves_floors),
            "is_naturally_lit": stair.is_naturally_lit,
            "has_smoke_vent": stair.has_smoke_vent,
        },
    )


def evaluate_stairs(ctx: EvaluationContext) -> List[Finding]:
    findings: List[Finding] = []
    for stair in ctx.project.stairs:
        findings.extend(_evaluate_width(stair, ctx))
        findings.extend(_evaluate_steps(stair))
        lighting = _evaluate_lighting(stair)
        if lighting is not None:
            findings.append(lighting)
    return findings
