from __future__ import annotations

from typing import Any, Dict, List

from egress.datasets.schema import OrdinanceDataset

# Stable rule identifiers. Ids are part of the output contract and must not be renamed.
RULE_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "EGR-OCC-001",
        "title": "Occupant load per space",
        "scope": "space",
        "module": "occupant_load",
    },
    {
        "id": "EGR-OCC-002",
        "title": "Occupant load factor not found, default used",
        "scope": "space",
        "module": "occupant_load",
    },
    {
        "id": "EGR-EXIT-001",
        "title": "Minimum number of exits",
        "scope": "space",
        "module": "exits",
    },
    {
        "id": "EGR-EXIT-003",
        "title": "Panic hardware on exits serving more than 100 people",
        "scope": "exit",
        "module": "exits",
    },
    {
        "id": "EGR-WIDTH-001",
        "title": "Minimum exit width",
        "scope": "exit",
        "module": "exits",
    },
    {
        "id": "EGR-WIDTH-002",
        "title": "Maximum single exit width",
        "scope": "exit",
        "module": "exits",
    },
    {
        "id": "EGR-TRAVEL-001",
        "title": "Maximum travel distance",
        "scope": "route",
        "module": "travel_distance",
    },
    {
        "id": "EGR-TRAVEL-002",
        "title": "Maximum dead-end length",
        "scope": "route",
        "module": "travel_distance",
    },
    {
        "id": "EGR-STAIR-001",
        "title": "Minimum stair flight width",
        "scope": "stair",
        "module": "stairs",
    },
    {
        "id": "EGR-STAIR-002",
        "title": "Maximum stair flight width without handrail division",
        "scope": "stair",
        "module": "stairs",
    },
    {
        "id": "EGR-STAIR-003",
        "title": "Minimum step width",
        "scope": "stair",
        "module": "stairs",
    },
    {
        "id": "EGR-STAIR-004",
        "title": "Maximum step height",
        "scope": "stair",
        "module": "stairs",
    },
    {
        "id": "EGR-STAIR-005",
        "title": "Natural light or smoke venting of enclosed stairs",
        "scope": "stair",
        "module": "stairs",
    },
]


def rule_ids() -> List[str]:
    return [r["id"] for r in RULE_CATALOG]


def catalog_for(dataset: OrdinanceDataset) -> List[Dict[str, Any]]:
    """Catalog entries enriched with the dataset's Bulgarian name and citation per rule."""
    out: List[Dict[str, Any]] = []
    for rule in RULE_CATALOG:
        info = dataset.rules.get(rule["id"])
        out.append(
            {
                **rule,
                "name_bg": info.name_bg if info else None,
                "description_bg": info.description_bg if info else "",
                "article_ref": info.article_ref if info else None,
            }
        )
    return out
