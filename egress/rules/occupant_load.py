from __future__ import annotations

from math import ceil
from typing import List, Tuple

from egress.models.schema import (
    ComputedSpace,
    EvaluationContext,
    Finding,
    FindingScope,
    FindingSeverity,
    FindingStatus,
    OccupantSource,
    Space,
)
from egress.rules.findings import cite, num
from egress.rules.lookup import lookup_occupant_load_factor

# m² per person used when Table 8 has no matching row (office standard)
DEFAULT_AREA_PER_PERSON_M2 = 5.0
TABLE_8_REF = cite("чл. 36, табл. 8")


def calculate_occupant_load(space: Space, ctx: EvaluationContext) -> ComputedSpace:
    data = space.model_dump()
    if space.occupants_override is not None and space.occupants_override > 0:
        return ComputedSpace(
            **data,
            computed_occupants=space.occupants_override,
            occupant_source=OccupantSource.OVERRIDE,
            area_per_person_m2=None,
        )

    entry = lookup_occupant_load_factor(
        ctx.dataset.tables.occupant_load_table_8,
        ctx.project.building.functional_class,
        space.purpose,
        space.floor == 0,
    )
    factor = entry.area_per_person_m2 if entry else DEFAULT_AREA_PER_PERSON_M2
    return ComputedSpace(
        **data,
        computed_occupants=ceil(space.area_m2 / factor),
        occupant_source=OccupantSource.CALCULATED,
        area_per_person_m2=factor,
    )


def calculate_total_occupants(ctx: EvaluationContext) -> Tuple[int, List[ComputedSpace]]:
    by_space = [calculate_occupant_load(sp, ctx) for sp in ctx.project.spaces]
    return sum(sp.computed_occupants for sp in by_space), by_space


def evaluate_occupant_load(ctx: EvaluationContext) -> List[Finding]:
    """EGR-OCC-001 for every space; EGR-OCC-002 when Table 8 had no factor."""
    out: List[Finding] = []
    building = ctx.project.building

    for space in ctx.project.spaces:
        computed = calculate_occupant_load(space, ctx)
        entry = lookup_occupant_load_factor(
            ctx.dataset.tables.occupant_load_table_8,
            building.functional_class,
            space.purpose,
            space.floor == 0,
        )

        if computed.occupant_source == OccupantSource.OVERRIDE:
            explanation = f"Брой хора: {computed.computed_occupants} (зададено ръчно)"
        else:
            explanation = (
                f"Брой хора: {computed.computed_occupants} "
                f"(изчислено от {num(space.area_m2)} m² / {num(computed.area_per_person_m2)} m²/човек)"
            )
        out.append(
            Finding(
                rule_id="EGR-OCC-001",
                status=FindingStatus.PASS,
                severity=FindingSeverity.INFO,
                scope=FindingScope.SPACE,
                subject_id=space.id,
                subject_name=space.name,
                measured=computed.computed_occupants,
                required=None,
                explanation=explanation,
                legal_reference=entry.article_ref if entry else TABLE_8_REF,
                details={
                    "area_m2": space.area_m2,
                    "area_per_person_m2": computed.area_per_person_m2,
                    "source": computed.occupant_source,
                    "functional_class": building.functional_class,
                },
            )
        )

        if entry is None and computed.occupant_source == OccupantSource.CALCULATED:
            out.append(
                Finding(
                    rule_id="EGR-OCC-002",
                    status=FindingStatus.REVIEW,
                    severity=FindingSeverity.WARNING,
                    scope=FindingScope.SPACE,
                    subject_id=space.id,
                    subject_name=space.name,
                    measured=None,
                    required=None,
                    explanation=(
                        f"Не е намерен коефициент за гъстота на обитаване за клас {building.functional_class} "
                        f'и предназначение "{space.purpose}". Използвана е стойност по подразбиране '
                        f"({num(DEFAULT_AREA_PER_PERSON_M2)} m²/човек)."
                    ),
                    legal_reference=TABLE_8_REF,
                    details={
                        "purpose": space.purpose,
                        "functional_class": building.functional_class,
                        "default_used": DEFAULT_AREA_PER_PERSON_M2,
                    },
                )
            )
    return out
