from __future__ import annotations

from typing import List

from egress.models.schema import (
    EvaluationContext,
    Exit,
    Finding,
    FindingScope,
    FindingSeverity,
    FindingStatus,
    Space,
)
from egress.rules.findings import cite, num, outcome
from egress.rules.lookup import DEFAULT_DOOR_WIDTH_M, lookup_min_exits, lookup_min_width
from egress.rules.occupant_load import calculate_occupant_load

SINGLE_LEAF_CHECK_OCCUPANTS = 50
PANIC_HARDWARE_OCCUPANTS = 100


def _exits_for_space(space: Space, exits: List[Exit]) -> List[Exit]:
    return [e for e in exits if space.id in e.serves_space_ids]


def _evaluate_min_exits(space: Space, ctx: EvaluationContext) -> Finding:
    building = ctx.project.building
    occupants = calculate_occupant_load(space, ctx).computed_occupants
    actual = len(_exits_for_space(space, ctx.project.exits))

    req = lookup_min_exits(
        ctx.dataset.tables.min_exits_by_occupants,
        building.functional_class,
        occupants,
        space.area_m2,
        space.is_underground,
        space.fire_hazard_category,
    )
    if req is None:
        return Finding(
            rule_id="EGR-EXIT-001",
            status=FindingStatus.REVIEW,
            severity=FindingSeverity.WARNING,
            scope=FindingScope.SPACE,
            subject_id=space.id,
            subject_name=space.name,
            measured=actual,
            required=None,
            explanation=(
                f"Не е намерено изискване за минимален брой изходи за {occupants} човека "
                f"в помещение от клас {building.functional_class}. Моля, проверете ръчно."
            ),
            legal_reference=cite("чл. 41-42"),
            details={"occupants": occupants, "area_m2": space.area_m2},
        )

    status, severity = outcome(actual >= req.min_exits)
    if status == FindingStatus.PASS:
        explanation = (
            f"Брой евакуационни изходи ({actual}) отговаря на изискването "
            f"(мин. {req.min_exits}) за {occupants} човека."
        )
    else:
        explanation = (
            f"Недостатъчен брой евакуационни изходи. Налични: {actual}, "
            f"Изискване: мин. {req.min_exits} за {occupants} човека."
        )
    return Finding(
        rule_id="EGR-EXIT-001",
        status=status,
        severity=severity,
        scope=FindingScope.SPACE,
        subject_id=space.id,
        subject_name=space.name,
        measured=actual,
        required=req.min_exits,
        explanation=explanation,
        legal_reference=req.article_ref,
        details={
            "occupants": occupants,
            "area_m2": space.area_m2,
            "is_underground": space.is_underground,
            "functional_class": building.functional_class,
        },
    )


def _evaluate_exit_width(exit_: Exit, ctx: EvaluationContext) -> List[Finding]:
    out: List[Finding] = []
    served = [sp for sp in ctx.project.spaces if sp.id in exit_.serves_space_ids]
    total = sum(calculate_occupant_load(sp, ctx).computed_occupants for sp in served)
    underground = any(sp.is_underground for sp in served)

    req = lookup_min_width(ctx.dataset.tables.min_widths, "exit_door", total, underground)
    if req is None:
        out.append(
            Finding(
                rule_id="EGR-WIDTH-001",
                status=FindingStatus.REVIEW,
                severity=FindingSeverity.WARNING,
                scope=FindingScope.EXIT,
                subject_id=exit_.id,
                subject_name=exit_.name,
                measured=exit_.width_m,
                required=None,
                explanation=f"Не е намерено изискване за минимална широчина за {total} човека.",
                legal_reference=cite("чл. 41"),
                details={"total_occupants": total},
            )
        )
        return out

    min_width = req.min_width_m or DEFAULT_DOOR_WIDTH_M
    status, severity = outcome(exit_.width_m >= min_width)
    if status == FindingStatus.PASS:
        explanation = (
            f"Широчина на изхода ({num(exit_.width_m)} m) отговаря на изискването "
            f"(мин. {num(min_width)} m) за {total} човека."
        )
    else:
        explanation = (
            f"Недостатъчна широчина на изхода. Измерена: {num(exit_.width_m)} m, "
            f"Изискване: мин. {num(min_width)} m за {total} човека."
        )
    out.append(
        Finding(
            rule_id="EGR-WIDTH-001",
            status=status,
            severity=severity,
            scope=FindingScope.EXIT,
            subject_id=exit_.id,
            subject_name=exit_.name,
            measured=exit_.width_m,
            required=min_width,
            explanation=explanation,
            legal_reference=req.article_ref,
            details={"total_occupants": total, "serves_spaces": tuple(exit_.serves_space_ids)},
        )
    )

    if total > SINGLE_LEAF_CHECK_OCCUPANTS and req.max_width_m and exit_.width_m > req.max_width_m:
        out.append(
            Finding(
                rule_id="EGR-WIDTH-002",
                status=FindingStatus.REVIEW,
                severity=FindingSeverity.WARNING,
                scope=FindingScope.EXIT,
                subject_id=exit_.id,
                subject_name=exit_.name,
                measured=exit_.width_m,
                required=req.max_width_m,
                explanation=(
                    f"Широчината на изхода ({num(exit_.width_m)} m) надвишава максималната единична "
                    f"широчина ({num(req.max_width_m)} m). Препоръчва се разделяне на изхода."
                ),
                legal_reference=cite("чл. 41, ал. 6"),
                details={"total_occupants": total},
            )
        )

    if total > PANIC_HARDWARE_OCCUPANTS and not exit_.has_panic_hardware:
        out.append(
            Finding(
                rule_id="EGR-EXIT-003",
                status=FindingStatus.FAIL,
                severity=FindingSeverity.BLOCKER,
                scope=FindingScope.EXIT,
                subject_id=exit_.id,
                subject_name=exit_.name,
                measured=None,
                required=None,
                explanation=(
                    f"Изходът обслужва над {PANIC_HARDWARE_OCCUPANTS} човека ({total}) и изисква "
                    f'брава тип "антипаник" съгласно БДС EN 1125.'
                ),
                legal_reference=cite("чл. 43, ал. 2"),
                details={"total_occupants": total, "has_panic_hardware": exit_.has_panic_hardware},
            )
        )
    return out


def evaluate_exits(ctx: EvaluationContext) -> List[Finding]:
    findings: List[Finding] = [_evaluate_min_exits(sp, ctx) for sp in ctx.project.spaces]
    for exit_ in ctx.project.exits:
        findings.extend(_evaluate_exit_width(exit_, ctx))
    return findings
