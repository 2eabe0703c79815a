from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import config
from catalog_repo import load_default_catalog
from courses.errors import CATALOG_NOT_FOUND, INVALID_CATALOG, CourseError
from courses.models import serialize_course
from courses.optimizer import CourseOptimizer


# -------------------------------------------------------------------------
# FastAPI app
# -------------------------------------------------------------------------
app = FastAPI(title="Course optimizer")

# Catalog problems come from server configuration, not from the request.
_UNAVAILABLE_CODES = {CATALOG_NOT_FOUND, INVALID_CATALOG}


@lru_cache(maxsize=1)
def get_optimizer() -> CourseOptimizer:
    """Optimizer over the configured catalog (COURSE_CATALOG_PATH or action_catalog.json)."""
    return CourseOptimizer(load_default_catalog())


@app.exception_handler(CourseError)
async def _course_error_handler(request: Request, exc: CourseError) -> JSONResponse:
    return JSONResponse(
        status_code=503 if exc.code in _UNAVAILABLE_CODES else 400,
        content={"code": exc.code, "message": exc.message, "details": exc.details},
    )


# -------------------------------------------------------------------------
# Pydantic models
# -------------------------------------------------------------------------
class OptimalCourseRequest(BaseModel):
    level: int
    proficiency: int = config.DEFAULT_PROFICIENCY


class SweepRequest(BaseModel):
    # [[level, proficiency], ...]; omitted -> the optimizer's level_array
    pairs: Optional[List[List[int]]] = Field(default=None)


# -------------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------------
@app.get("/api/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok"}


@app.post("/api/courses/optimal")
def optimal_course(req: OptimalCourseRequest, optimizer: CourseOptimizer = Depends(get_optimizer)) -> Dict[str, Any]:
    result = optimizer.optimal_course(req.level, req.proficiency)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No course available at level {req.level}")
    return serialize_course(result)


@app.post("/api/courses/sweep")
def course_sweep(req: SweepRequest, optimizer: CourseOptimizer = Depends(get_optimizer)) -> Dict[str, Any]:
    pairs = req.pairs if req.pairs is not None else optimizer.level_array
    for idx, pair in enumerate(pairs):
        if len(pair) != 2:
            raise HTTPException(status_code=422, detail=f"pairs[{idx}] must be [level, proficiency]")
    results = optimizer.optimal_course_sweep(pairs)
    return {
        "results": [
            {
                "level": level,
                "proficiency": proficiency,
                "course": serialize_course(result) if result is not None else None,
            }
            for (level, proficiency), result in zip(pairs, results)
        ]
    }
