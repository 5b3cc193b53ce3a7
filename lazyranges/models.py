"""
Pydantic models for the range evaluation API.
"""

from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from enum import Enum

from .ranges import BINARY_FUNCTIONS

# Upper bound for elements materialised by a single request
MAX_TAKE = 10_000


class SourceKind(str, Enum):
    """Supported source ranges"""
    ARRAY = "array"
    NULL_TERMINATED = "null_terminated"
    INFINITE = "infinite"
    EMPTY = "empty"
    ONLY = "only"
    ONLY_LAZY = "only_lazy"


class SourceSpec(BaseModel):
    """Description of the range a pipeline starts from"""
    kind: SourceKind = Field(..., description="Kind of source range")
    values: Optional[List[Union[int, float, str]]] = Field(
        None,
        description="Block of elements for array, null_terminated and single-value sources",
        json_schema_extra={"example": [1, 2, 3]}
    )
    text: Optional[str] = Field(
        None,
        description="Character block, alternative to values",
        json_schema_extra={"example": "foo\u0000"}
    )
    start: Union[int, float] = Field(
        0,
        description="First value of an infinite source, or start offset of a null_terminated source"
    )
    sentinel: Optional[Union[int, str]] = Field(
        None,
        description="Terminator for null_terminated sources (defaults to the zero value)"
    )
    checked: Optional[bool] = Field(
        None,
        description="Bounds checking for array sources (defaults to the configured mode)"
    )

    @model_validator(mode='after')
    def validate_block(self):
        """Validate the block required by the source kind"""
        needs_block = (SourceKind.ARRAY, SourceKind.NULL_TERMINATED, SourceKind.ONLY, SourceKind.ONLY_LAZY)
        if self.kind in needs_block and self.values is None and self.text is None:
            raise ValueError(f"Source kind '{self.kind.value}' requires values or text")
        if self.kind in (SourceKind.ONLY, SourceKind.ONLY_LAZY) and len(self.block()) != 1:
            raise ValueError(f"Source kind '{self.kind.value}' requires exactly one value")
        if self.kind == SourceKind.NULL_TERMINATED:
            block = self.block()
            sentinel = self.resolved_sentinel()
            if not isinstance(self.start, int) or self.start < 0:
                raise ValueError("start of a null_terminated source must be a non-negative integer")
            if sentinel not in list(block)[self.start:]:
                raise ValueError(f"Block is not terminated by sentinel {sentinel!r}")
        return self

    def block(self):
        """The source block: text takes precedence over values"""
        if self.text is not None:
            return self.text
        return self.values or []

    def resolved_sentinel(self):
        if self.sentinel is not None:
            return self.sentinel
        return "\0" if self.text is not None else 0


class PipelineRequest(BaseModel):
    """A source, an optional pairwise stage and an external bound"""
    source: SourceSpec = Field(..., description="Source range")
    pairwise: Optional[str] = Field(
        None,
        description="Binary function applied to consecutive pairs",
        json_schema_extra={"example": "a+b"}
    )
    take: Optional[int] = Field(
        None,
        description="Maximum number of elements to return",
        ge=0,
        le=MAX_TAKE
    )
    index: Optional[int] = Field(
        None,
        description="Offset to read from the source by random access",
        ge=0
    )

    @field_validator('pairwise')
    @classmethod
    def validate_pairwise(cls, v):
        """Validate the binary function shorthand is known"""
        if v is not None and v not in BINARY_FUNCTIONS:
            raise ValueError(f"Invalid pairwise function: {v}. Valid functions: {list(BINARY_FUNCTIONS)}")
        return v

    @model_validator(mode='after')
    def validate_bound(self):
        """Infinite sources must be bounded"""
        if self.source.kind == SourceKind.INFINITE and self.take is None:
            raise ValueError("Infinite sources require 'take'")
        return self


class PerformanceInfo(BaseModel):
    """Timing of a pipeline evaluation"""
    processing_time_ms: float = Field(..., description="Evaluation time in milliseconds", ge=0)
    output_size: int = Field(..., description="Number of elements produced", ge=0)
    operation: str = Field(..., description="Pipeline description")


class PipelineResponse(BaseModel):
    """Result of evaluating a pipeline"""
    ok: bool = Field(True, description="Request success status")
    elements: List[Any] = Field(..., description="Materialised elements")
    capabilities: List[str] = Field(..., description="Capabilities of the final (unbounded) stage")
    source_length: Optional[int] = Field(None, description="Length of the source, when finite")
    indexed_value: Optional[Any] = Field(None, description="Value read at 'index'")
    performance: PerformanceInfo = Field(..., description="Evaluation metrics")


class RangeInfo(BaseModel):
    """A registered range class"""
    name: str = Field(..., description="Range class name")
    capabilities: List[str] = Field(..., description="Declared capability sets")
    description: str = Field(..., description="First line of the class docstring")


class RangeRegistryResponse(BaseModel):
    """Registered range classes"""
    ok: bool = Field(True, description="Request success status")
    ranges: List[RangeInfo] = Field(..., description="Registered ranges")
    total_ranges: int = Field(..., description="Number of registered ranges", ge=0)
    timestamp: datetime = Field(..., description="Response timestamp")


class BenchmarkRequest(BaseModel):
    """Parameters for the checked vs unchecked traversal benchmark"""
    size: int = Field(10_000, description="Number of elements traversed", ge=1, le=1_000_000)
    repeat: int = Field(1, description="Number of traversals per mode", ge=1, le=50)


class BenchmarkResponse(BaseModel):
    """Checked vs unchecked traversal timings"""
    ok: bool = Field(True, description="Request success status")
    size: int = Field(..., ge=1)
    repeat: int = Field(..., ge=1)
    checked_time_ms: float = Field(..., description="Checked traversal time in milliseconds", ge=0)
    unchecked_time_ms: float = Field(..., description="Unchecked traversal time in milliseconds", ge=0)
    speedup: Optional[float] = Field(None, description="checked_time / unchecked_time")
    timestamp: datetime = Field(..., description="Benchmark timestamp")


class MetricsResponse(BaseModel):
    """Accumulated performance metrics"""
    total_operations: int = Field(..., ge=0)
    total_time_ms: float = Field(..., ge=0)
    total_memory_mb: float = Field(..., ge=0)
    avg_time_ms: float = Field(..., ge=0)
    avg_memory_mb: float = Field(..., ge=0)


class StatusResponse(BaseModel):
    """Service banner"""
    ok: bool = Field(True, description="Service status")
    message: str = Field(..., description="Status message")
    timestamp: datetime = Field(..., description="Response timestamp")
