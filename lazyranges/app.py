"""FastAPI app for evaluating lazy range pipelines and inspecting range capabilities."""

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .contracts import PreconditionViolation, get_registered_ranges
from .models import (
    PipelineRequest, PipelineResponse, PerformanceInfo, RangeInfo, RangeRegistryResponse,
    BenchmarkRequest, BenchmarkResponse, MetricsResponse, StatusResponse
)
from .utils import (
    measure_performance,
    get_performance_summary,
    compare_checked_modes,
    process_range_pipeline,
    uses_unchecked_array
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lazy Ranges",
    description="Lazy, pull-based range adapters with declared capability sets",
    version="1.0.0"
)


def log_registered_ranges():
    registry = get_registered_ranges()
    logger.info(f"Registered {len(registry)} range classes: {', '.join(sorted(registry))}")


log_registered_ranges()


@app.get("/", response_model=StatusResponse)
async def root():
    """Basic service banner."""
    return StatusResponse(
        ok=True,
        message="Lazy Ranges operational - Features: pointer-pair, sentinel, pairwise, infinite, empty and deferred ranges",
        timestamp=datetime.now()
    )


@app.get("/ranges", response_model=RangeRegistryResponse)
async def list_ranges():
    """List registered range classes and their declared capabilities."""
    registry = get_registered_ranges()
    ranges = [
        RangeInfo(
            name=name,
            capabilities=info["capabilities"],
            description=(info["class"].__doc__ or "No description").strip().split("\n")[0]
        )
        for name, info in sorted(registry.items())
    ]
    return RangeRegistryResponse(
        ok=True,
        ranges=ranges,
        total_ranges=len(ranges),
        timestamp=datetime.now()
    )


@app.post("/ranges/evaluate", response_model=PipelineResponse)
async def evaluate_pipeline(request: PipelineRequest):
    """Evaluate source -> [pairwise] -> [take] and return the elements."""
    try:
        info = measure_performance("pipeline", process_range_pipeline, request)
    except IndexError as e:
        if not uses_unchecked_array(request.source):
            raise
        logger.error(f"Unchecked access out of bounds: {e}")
        raise HTTPException(status_code=422, detail=f"Out of bounds: {e}")
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = info["result"]
    return PipelineResponse(
        ok=True,
        elements=result["elements"],
        capabilities=result["capabilities"],
        source_length=result["source_length"],
        indexed_value=result["indexed_value"],
        performance=PerformanceInfo(**result["performance"])
    )


@app.post("/ranges/benchmark", response_model=BenchmarkResponse)
async def benchmark(request: BenchmarkRequest):
    """Compare checked and unchecked array range traversal."""
    data = list(range(request.size))
    result = compare_checked_modes(data, repeat=request.repeat)
    return BenchmarkResponse(ok=True, timestamp=datetime.now(), **result)


@app.get("/metrics", response_model=MetricsResponse)
async def metrics():
    """Accumulated pipeline performance metrics."""
    return MetricsResponse(**get_performance_summary())


# Exception handlers
@app.exception_handler(PreconditionViolation)
async def precondition_violation_handler(request: Request, exc: PreconditionViolation):
    logger.error(f"Precondition violated on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "Precondition Violation",
            "detail": str(exc),
            "type": "precondition_violation"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
