from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from egress.core.evaluator import evaluate, validate_context
from egress.datasets.loader import (
    AVAILABLE_DATASETS,
    DatasetError,
    get_current_dataset_version,
    get_dataset_meta,
    load_dataset,
)
from egress.models.schema import EvaluationContext, EvaluationResult, Project, ValidationOutcome
from egress.rules.catalog import catalog_for

app = FastAPI(title="Egress Checker", version="0.1.0")
logger = logging.getLogger(__name__)


class ProjectRequest(BaseModel):
    project: Project
    dataset_version: Optional[str] = None


def _context(req: ProjectRequest) -> EvaluationContext:
    try:
        dataset = load_dataset(req.dataset_version)
    except DatasetError as e:
        logger.warning("Dataset lookup failed: %s", e)
        raise HTTPException(status_code=404, detail=str(e))
    return EvaluationContext(project=req.project, dataset=dataset)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/rules")
def list_rules(dataset_version: Optional[str] = None) -> List[Dict[str, Any]]:
    try:
        dataset = load_dataset(dataset_version)
    except DatasetError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return catalog_for(dataset)


@app.get("/datasets")
def list_datasets():
    return {"available": list(AVAILABLE_DATASETS), "current": get_current_dataset_version()}


@app.get("/datasets/{version}")
def dataset_meta(version: str):
    try:
        return get_dataset_meta(version)
    except DatasetError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/validate", response_model=ValidationOutcome)
def validate_project(req: ProjectRequest):
    return validate_context(_context(req))


@app.post("/evaluate", response_model=EvaluationResult)
def evaluate_project(req: ProjectRequest):
    """Evaluate a project; structurally invalid projects are rejected with 422."""
    logger.info("Evaluation requested for project %s", req.project.id)
    ctx = _context(req)
    check = validate_context(ctx)
    if not check.valid:
        raise HTTPException(status_code=422, detail=check.errors)
    try:
        return evaluate(ctx)
    except Exception:
        logger.error("Evaluation failed for project %s", req.project.id, exc_info=True)
        raise
