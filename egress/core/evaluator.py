from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from egress.models.schema import (
    EvaluationContext,
    EvaluationResult,
    EvaluationSummary,
    Finding,
    FindingSeverity,
    FindingStatus,
    ValidationOutcome,
)
from egress.rules.exits import evaluate_exits
from egress.rules.occupant_load import evaluate_occupant_load
from egress.rules.stairs import evaluate_stairs
from egress.rules.travel_distance import evaluate_travel_distance

logger = logging.getLogger(__name__)

# Fixed module order; the final sort makes the output independent of it anyway.
RULE_MODULES = (
    evaluate_occupant_load,
    evaluate_exits,
    evaluate_travel_distance,
    evaluate_stairs,
)

SEVERITY_ORDER = {
    FindingSeverity.BLOCKER: 0,
    FindingSeverity.WARNING: 1,
    FindingSeverity.INFO: 2,
}
STATUS_ORDER = {
    FindingStatus.FAIL: 0,
    FindingStatus.REVIEW: 1,
    FindingStatus.PASS: 2,
}


def _sort_key(f: Finding):
    return SEVERITY_ORDER[f.severity], STATUS_ORDER[f.status], f.rule_id


def summarize(findings: List[Finding]) -> EvaluationSummary:
    return EvaluationSummary(
        total_rules=len(findings),
        passed=sum(1 for f in findings if f.status == FindingStatus.PASS),
        failed=sum(1 for f in findings if f.status == FindingStatus.FAIL),
        review=sum(1 for f in findings if f.status == FindingStatus.REVIEW),
        blockers=sum(
            1 for f in findings if f.severity == FindingSeverity.BLOCKER and f.status == FindingStatus.FAIL
        ),
    )


def evaluate(ctx: EvaluationContext) -> EvaluationResult:
    """Run every rule module over the project and return sorted findings.

    The context must have passed ``validate_context``. Identical inputs give
    identical findings and summary; only ``evaluated_at`` differs between runs.
    """
    findings: List[Finding] = []
    for module in RULE_MODULES:
        findings.extend(module(ctx))
    # sorted() is stable, so findings equal on every key keep module order
    findings = sorted(findings, key=_sort_key)
    summary = summarize(findings)
    logger.debug(
        "Evaluated project %s against %s: %d findings, %d blockers",
        ctx.project.id,
        ctx.dataset.meta.version,
        summary.total_rules,
        summary.blockers,
    )
    return EvaluationResult(
        project_id=ctx.project.id,
        evaluated_at=datetime.now(timezone.utc).isoformat(),
        dataset_version=ctx.dataset.meta.version,
        summary=summary,
        findings=findings,
    )


def validate_context(ctx: EvaluationContext) -> ValidationOutcome:
    """Structural pre-check of a context; rule outcomes are not computed here."""
    project = ctx.project
    if project is None:
        return ValidationOutcome(valid=False, errors=["Project data is missing"])

    errors: List[str] = []
    if project.building is None:
        errors.append("Building data is missing")

    spaces = project.spaces or []
    exits = project.exits or []
    routes = project.routes or []
    if not spaces:
        errors.append("At least one space is required")

    space_ids = [sp.id for sp in spaces]
    if len(set(space_ids)) != len(space_ids):
        errors.append("Duplicate space IDs found")

    known_spaces = set(space_ids)
    known_exits = {e.id for e in exits}
    for route in routes:
        if route.from_space_id not in known_spaces:
            errors.append(f"Route {route.id} references unknown space {route.from_space_id}")
        if route.to_exit_id not in known_exits:
            errors.append(f"Route {route.id} references unknown exit {route.to_exit_id}")
    for exit_ in exits:
        for sid in exit_.serves_space_ids:
            if sid not in known_spaces:
                errors.append(f"Exit {exit_.id} references unknown space {sid}")

    if ctx.dataset is None:
        errors.append("Dataset is missing")
    elif getattr(ctx.dataset.tables, "occupant_load_table_8", None) is None:
        errors.append("Occupant load table is missing from dataset")

    if errors:
        logger.debug("Context for project %s is invalid: %s", project.id, errors)
    return ValidationOutcome(valid=not errors, errors=errors)


def has_blockers(ctx: EvaluationContext) -> bool:
    return evaluate(ctx).summary.blockers > 0


def get_failed_findings(ctx: EvaluationContext) -> List[Finding]:
    return [f for f in evaluate(ctx).findings if f.status == FindingStatus.FAIL]
