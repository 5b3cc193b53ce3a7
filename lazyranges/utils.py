"""
Helpers for building, evaluating and measuring range pipelines.

Used by the HTTP layer and the demo; everything here composes the
adapters from ``ranges`` and records timings in a module-level store.
"""

import time
import gc
import math
import logging
import tracemalloc
from collections import deque
from typing import Any, Dict, List

from .contracts import describe_capabilities, has_length, is_random_access_range
from .models import PipelineRequest, SourceKind, SourceSpec
from .ranges import (
    CHECKED_BY_DEFAULT,
    fast_array_range,
    null_terminated,
    infinite_iota,
    empty_range,
    only,
    only_lazy,
    pairwise,
    take,
)

logger = logging.getLogger(__name__)


# Number of most recent operations kept in the performance store
MAX_RECORDED_OPERATIONS = 100

# Global performance tracking
_performance_metrics = {
    "operations": deque(maxlen=MAX_RECORDED_OPERATIONS),
    "total_time_ms": 0.0,
    "total_memory_mb": 0.0,
    "operation_count": 0
}


def _record(performance_info: Dict[str, Any]):
    _performance_metrics["operations"].append(performance_info)
    _performance_metrics["total_time_ms"] += performance_info["execution_time_ms"]
    _performance_metrics["total_memory_mb"] += performance_info["memory_usage_mb"]
    _performance_metrics["operation_count"] += 1


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """Measure a function call with time and memory tracking"""
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        current, peak = tracemalloc.get_traced_memory()

        performance_info = {
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": True,
            "timestamp": time.time()
        }
        _record(performance_info)
        return {**performance_info, "result": result}

    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        current, peak = tracemalloc.get_traced_memory()
        _record({
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": False,
            "error": str(e),
            "timestamp": time.time()
        })
        raise

    finally:
        tracemalloc.stop()


def get_performance_summary() -> Dict[str, Any]:
    """Get summary of all performance metrics"""
    count = _performance_metrics["operation_count"]
    if count == 0:
        return {
            "total_operations": 0,
            "total_time_ms": 0.0,
            "total_memory_mb": 0.0,
            "avg_time_ms": 0.0,
            "avg_memory_mb": 0.0
        }

    return {
        "total_operations": count,
        "total_time_ms": _performance_metrics["total_time_ms"],
        "total_memory_mb": _performance_metrics["total_memory_mb"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / count,
        "avg_memory_mb": _performance_metrics["total_memory_mb"] / count
    }


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = {
        "operations": deque(maxlen=MAX_RECORDED_OPERATIONS),
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }


def _traverse(r) -> int:
    total = 0
    while not r.empty:
        r.front
        r.pop_front()
        total += 1
    return total


def compare_checked_modes(data: List[Any], repeat: int = 1) -> Dict[str, Any]:
    """Time front/pop_front traversals of data with and without bounds checks"""
    timings = {}
    for checked in (True, False):
        start_time = time.perf_counter()
        for _ in range(repeat):
            _traverse(fast_array_range(data, checked=checked))
        timings[checked] = (time.perf_counter() - start_time) * 1000

    speedup = timings[True] / timings[False] if timings[False] > 0 else None
    logger.info(f"Traversed {len(data)} elements x{repeat}: checked {timings[True]:.3f}ms, "
                f"unchecked {timings[False]:.3f}ms")
    return {
        "size": len(data),
        "repeat": repeat,
        "checked_time_ms": timings[True],
        "unchecked_time_ms": timings[False],
        "speedup": speedup
    }


def build_source(spec: SourceSpec):
    """Build the source range a SourceSpec describes"""
    block = spec.block()

    if spec.kind == SourceKind.ARRAY:
        return fast_array_range(block, checked=spec.checked)
    elif spec.kind == SourceKind.NULL_TERMINATED:
        return null_terminated(block, int(spec.start), spec.resolved_sentinel())
    elif spec.kind == SourceKind.INFINITE:
        return infinite_iota(spec.start)
    elif spec.kind == SourceKind.EMPTY:
        return empty_range()
    elif spec.kind == SourceKind.ONLY:
        return only(block[0])
    elif spec.kind == SourceKind.ONLY_LAZY:
        return only_lazy(lambda: block[0])
    else:
        raise ValueError(f"Unknown source kind: {spec.kind}")


def process_range_pipeline(request: PipelineRequest) -> Dict[str, Any]:
    """Build and drain a pipeline: source -> [pairwise] -> [take]"""
    start_time = time.perf_counter()
    source = build_source(request.source)
    operation = [request.source.kind.value]

    indexed_value = None
    if request.index is not None:
        if not is_random_access_range(source):
            raise TypeError(f"Source '{request.source.kind.value}' does not support random access")
        indexed_value = source.save()[request.index]
        operation.append(f"index_{request.index}")

    source_length = len(source) if has_length(source) else None

    stage = source
    if request.pairwise is not None:
        stage = pairwise(request.pairwise, source)
        operation.append(f"pairwise_{request.pairwise}")
    capabilities = describe_capabilities(stage)

    if request.take is not None:
        stage = take(stage, request.take)
        operation.append(f"take_{request.take}")

    elements = list(stage)
    _ensure_finite(elements, "Pipeline")
    if indexed_value is not None:
        _ensure_finite([indexed_value], "Index")
    processing_time_ms = (time.perf_counter() - start_time) * 1000

    return {
        "elements": elements,
        "capabilities": capabilities,
        "source_length": source_length,
        "indexed_value": indexed_value,
        "performance": {
            "processing_time_ms": processing_time_ms,
            "output_size": len(elements),
            "operation": "_".join(operation)
        }
    }


def get_recent_operations() -> List[Dict[str, Any]]:
    """Most recent recorded operations, oldest first"""
    return list(_performance_metrics["operations"])


def uses_unchecked_array(spec: SourceSpec) -> bool:
    """Whether a source builds an array range without bounds checks"""
    if spec.kind != SourceKind.ARRAY:
        return False
    checked = CHECKED_BY_DEFAULT if spec.checked is None else spec.checked
    return not checked


def _ensure_finite(values: List[Any], what: str):
    for value in values:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"{what} produced a non-finite value: {value}")
