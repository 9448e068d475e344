from __future__ import annotations

from typing import Tuple

from egress.models.schema import FindingSeverity, FindingStatus

ORDINANCE = "Наредба № Iз-1971"


def cite(article: str) -> str:
    """Legal reference for an article of the ordinance, e.g. cite('чл. 44')."""
    return f"{ORDINANCE}, {article}"


def outcome(passed: bool) -> Tuple[FindingStatus, FindingSeverity]:
    # Comparison rules: a pass is informational, a failure blocks submission.
    if passed:
        return FindingStatus.PASS, FindingSeverity.INFO
    return FindingStatus.FAIL, FindingSeverity.BLOCKER


def num(value: float) -> str:
    """Render a measurement without trailing zeros (100.0 -> '100', 0.90 -> '0.9')."""
    return f"{value:g}"
