"""Lazy, pull-based range adapters."""

from .contracts import (
    CapabilityContract,
    ContractViolationError,
    PreconditionViolation,
    RangeBase,
    RangeMeta,
    INPUT_RANGE,
    FORWARD_RANGE,
    BIDIRECTIONAL_RANGE,
    RANDOM_ACCESS_RANGE,
    is_input_range,
    is_forward_range,
    is_bidirectional_range,
    is_random_access_range,
    is_infinite,
    describe_capabilities,
)
from .ranges import (
    CHECKED_BY_DEFAULT,
    CheckedArrayRange,
    UncheckedArrayRange,
    NullTerminated,
    InfiniteIota,
    EmptyRange,
    Only,
    OnlyLazy,
    LazyInitRange,
    fast_array_range,
    ptr_slice,
    null_terminated,
    pairwise,
    binary_fun,
    infinite_iota,
    empty_range,
    only,
    only_lazy,
    lazy_init_range,
    as_range,
    map_range,
    zip_ranges,
    drop_one,
    take,
    to_list,
)

__version__ = "1.0.0"
