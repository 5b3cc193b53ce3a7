"""
Lazy range adapters.

Every range here is a small pull-based state machine exposing some of
``empty`` / ``front`` / ``pop_front()`` / ``save()`` / ``back`` /
``pop_back()`` / ``r[i]`` / ``len(r)``. Which of those a class offers is
declared through its ``capabilities`` and checked when the class is
created (see ``contracts.RangeMeta``).

Ranges alias the data they wrap. The caller keeps the underlying block
alive and must not modify it in a conflicting way while a range over it
is in use. Nothing here is thread-safe.
"""

import os
import logging
import operator
from collections.abc import Iterable, Sequence
from typing import Any, Callable, Optional

from .contracts import (
    RangeBase,
    INPUT_RANGE,
    FORWARD_RANGE,
    BIDIRECTIONAL_RANGE,
    RANDOM_ACCESS_RANGE,
    is_input_range,
    is_forward_range,
    has_length,
    require,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid value for {name}: {value!r}")


# Resolved once at import. Follows __debug__ (off under ``python -O``) unless overridden.
CHECKED_BY_DEFAULT = _env_flag("LAZYRANGES_CHECKED", __debug__)


# --------- pointer-pair ranges ----------

def ptr_slice(block, start: int, end: int):
    """Elements of block between two positions."""
    return block[start:end]


class ArrayRangeBase(RangeBase):
    """
    Array range keeping a (ptr, end) position pair instead of (ptr, length),
    so advancing is a single increment.

    ``end`` is snapshotted at construction: elements appended to the block
    later are not part of the range.
    """
    __abstract__ = True

    def __init__(self, block=()):
        self.block = block
        self.ptr = 0
        self.end = len(block)

    @property
    def empty(self) -> bool:
        return self.ptr == self.end

    def __len__(self) -> int:
        return self.end - self.ptr

    def save(self):
        copy = self.__class__.__new__(self.__class__)
        copy.block = self.block
        copy.ptr = self.ptr
        copy.end = self.end
        return copy

    def slice(self):
        """All remaining elements."""
        return ptr_slice(self.block, self.ptr, self.end)

    def __repr__(self):
        return f"<{self.__class__.__name__} ptr={self.ptr} end={self.end}>"


class CheckedArrayRange(ArrayRangeBase, capabilities=[RANDOM_ACCESS_RANGE, BIDIRECTIONAL_RANGE]):
    """Bounds-checked array range: misuse raises PreconditionViolation."""

    @property
    def front(self):
        require(self.ptr != self.end, "front of an empty ArrayRange")
        return self.block[self.ptr]

    def pop_front(self):
        require(self.ptr != self.end, "pop_front of an empty ArrayRange")
        self.ptr += 1

    @property
    def back(self):
        require(self.ptr != self.end, "back of an empty ArrayRange")
        return self.block[self.end - 1]

    def pop_back(self):
        require(self.ptr != self.end, "pop_back of an empty ArrayRange")
        self.end -= 1

    def __getitem__(self, index):
        length = self.end - self.ptr
        if isinstance(index, slice):
            require(index.step is None, "ArrayRange slices do not support a step")
            start = 0 if index.start is None else index.start
            stop = length if index.stop is None else index.stop
            require(0 <= start <= stop <= length,
                    f"slice [{start}:{stop}] out of bounds for length {length}")
            return ptr_slice(self.block, self.ptr + start, self.ptr + stop)
        require(0 <= index < length, f"index {index} out of bounds for length {length}")
        return self.block[self.ptr + index]


class UncheckedArrayRange(ArrayRangeBase, capabilities=[RANDOM_ACCESS_RANGE, BIDIRECTIONAL_RANGE]):
    """
    Array range without any bounds checks.

    Unchecked: the caller must not read, pop or index past the end.
    Doing so is undefined (it may return elements outside the range or
    raise whatever the block raises).
    """

    @property
    def front(self):
        return self.block[self.ptr]

    def pop_front(self):
        self.ptr += 1

    @property
    def back(self):
        return self.block[self.end - 1]

    def pop_back(self):
        self.end -= 1

    def __getitem__(self, index):
        if isinstance(index, slice):
            start = 0 if index.start is None else index.start
            stop = self.end - self.ptr if index.stop is None else index.stop
            return ptr_slice(self.block, self.ptr + start, self.ptr + stop)
        return self.block[self.ptr + index]


def fast_array_range(block, checked: Optional[bool] = None) -> ArrayRangeBase:
    """Wrap a sequence in a pointer-pair range (checked unless configured otherwise)."""
    if checked is None:
        checked = CHECKED_BY_DEFAULT
    if checked:
        return CheckedArrayRange(block)
    return UncheckedArrayRange(block)


# --------- sentinel-terminated ranges ----------

def _default_sentinel(block):
    if isinstance(block, str):
        return "\0"
    return 0


class NullTerminated(RangeBase, capabilities=[FORWARD_RANGE]):
    """
    Presents a sentinel-terminated block (a C-like string) as a range.

    Emptiness is tested by comparing the current element with the sentinel,
    so the length is never computed. The block must actually contain the
    sentinel at or after ``start``.
    """

    def __init__(self, block, start: int = 0, sentinel: Any = None):
        self.block = block
        self.ptr = start
        self.sentinel = _default_sentinel(block) if sentinel is None else sentinel

    @property
    def empty(self) -> bool:
        return self.block[self.ptr] == self.sentinel

    @property
    def front(self):
        return self.block[self.ptr]

    def pop_front(self):
        self.ptr += 1

    def save(self):
        return NullTerminated(self.block, self.ptr, self.sentinel)

    def __repr__(self):
        return f"<NullTerminated ptr={self.ptr} sentinel={self.sentinel!r}>"


def null_terminated(block, start: int = 0, sentinel: Any = None) -> NullTerminated:
    return NullTerminated(block, start, sentinel)


# --------- generic composition ----------

_MISSING = object()


class IteratorRange(RangeBase, capabilities=[INPUT_RANGE]):
    """Input range over an arbitrary Python iterable, with one element of lookahead."""

    def __init__(self, iterable: Iterable):
        self._it = iter(iterable)
        self._head = _MISSING
        self._done = False

    def _fill(self):
        if self._head is _MISSING and not self._done:
            try:
                self._head = next(self._it)
            except StopIteration:
                self._done = True

    @property
    def empty(self) -> bool:
        self._fill()
        return self._head is _MISSING

    @property
    def front(self):
        require(not self.empty, "front of an exhausted IteratorRange")
        return self._head

    def pop_front(self):
        require(not self.empty, "pop_front of an exhausted IteratorRange")
        self._head = _MISSING


def as_range(obj):
    """Return obj as a range: ranges pass through, sequences and iterables are wrapped."""
    if is_input_range(obj):
        return obj
    if isinstance(obj, Sequence):
        return fast_array_range(obj)
    if isinstance(obj, Iterable):
        return IteratorRange(obj)
    raise TypeError(f"Cannot make a range from {type(obj).__name__}")


class MapRange(RangeBase, capabilities=[INPUT_RANGE]):
    """Applies fn to each element on demand."""

    def __init__(self, fn: Callable, source):
        self.fn = fn
        self.source = source

    @property
    def empty(self) -> bool:
        return self.source.empty

    @property
    def front(self):
        return self.fn(self.source.front)

    def pop_front(self):
        self.source.pop_front()


class ForwardMapRange(MapRange, capabilities=[FORWARD_RANGE]):

    def save(self):
        return self.__class__(self.fn, self.source.save())


class SizedMapRange(MapRange):
    """Map over a source that knows its length."""

    def __len__(self) -> int:
        return len(self.source)


class SizedForwardMapRange(ForwardMapRange):

    def __len__(self) -> int:
        return len(self.source)


def map_range(fn: Callable, r):
    r = as_range(r)
    if is_forward_range(r):
        cls = SizedForwardMapRange if has_length(r) else ForwardMapRange
    else:
        cls = SizedMapRange if has_length(r) else MapRange
    return cls(fn, r)


class ZipRange(RangeBase, capabilities=[INPUT_RANGE]):
    """Tuples of the sources' fronts; empty as soon as any source is."""

    def __init__(self, *sources):
        self.sources = sources

    @property
    def empty(self) -> bool:
        return any(s.empty for s in self.sources)

    @property
    def front(self):
        return tuple(s.front for s in self.sources)

    def pop_front(self):
        for s in self.sources:
            s.pop_front()


class ForwardZipRange(ZipRange, capabilities=[FORWARD_RANGE]):

    def save(self):
        return self.__class__(*[s.save() for s in self.sources])


class SizedZipRange(ZipRange):
    """Zip whose sources all know their length; len is the shortest."""

    def __len__(self) -> int:
        return min(len(s) for s in self.sources)


class SizedForwardZipRange(ForwardZipRange):

    def __len__(self) -> int:
        return min(len(s) for s in self.sources)


def zip_ranges(*ranges):
    sources = [as_range(r) for r in ranges]
    sized = bool(sources) and all(has_length(s) for s in sources)
    if all(is_forward_range(s) for s in sources):
        cls = SizedForwardZipRange if sized else ForwardZipRange
    else:
        cls = SizedZipRange if sized else ZipRange
    return cls(*sources)


def drop_one(r):
    """Pop the first element if there is one; returns the same range."""
    r = as_range(r)
    if not r.empty:
        r.pop_front()
    return r


class TakeRange(RangeBase, capabilities=[INPUT_RANGE]):
    """At most ``count`` elements of the source."""

    def __init__(self, source, count: int):
        self.source = source
        self.remaining = count

    @property
    def empty(self) -> bool:
        return self.remaining <= 0 or self.source.empty

    @property
    def front(self):
        require(not self.empty, "front of an exhausted TakeRange")
        return self.source.front

    def pop_front(self):
        require(not self.empty, "pop_front of an exhausted TakeRange")
        self.source.pop_front()
        self.remaining -= 1


class ForwardTakeRange(TakeRange, capabilities=[FORWARD_RANGE]):

    def save(self):
        return ForwardTakeRange(self.source.save(), self.remaining)


def take(r, count: int):
    r = as_range(r)
    count = max(int(count), 0)
    if is_forward_range(r):
        return ForwardTakeRange(r, count)
    return TakeRange(r, count)


def to_list(r) -> list:
    return list(as_range(r))


# --------- pairwise ----------

BINARY_FUNCTIONS = {
    "a+b": operator.add,
    "a-b": operator.sub,
    "b-a": lambda a, b: b - a,
    "a*b": operator.mul,
    "max": max,
    "min": min,
}


def binary_fun(fn) -> Callable:
    """Resolve a binary function given as a callable or a shorthand like "a+b"."""
    if callable(fn):
        return fn
    try:
        return BINARY_FUNCTIONS[fn]
    except KeyError:
        raise ValueError(f"Unknown binary function: {fn!r}. "
                         f"Valid shorthands: {list(BINARY_FUNCTIONS)}") from None


def pairwise(fn, r=None):
    """
    Apply fn over each consecutive pair: output[i] = fn(r[i], r[i+1]).

    ``pairwise(fn)`` returns an adapter; ``pairwise(fn, r)`` applies it.
    The result is zip(r, r minus its first element) mapped through fn, so
    it is lazy and restartable exactly when r is a forward range.
    """
    combine = binary_fun(fn)

    def apply(source):
        source = as_range(source)
        if not is_forward_range(source):
            raise TypeError("pairwise needs a forward range (one that supports save())")
        pairs = zip_ranges(source.save(), drop_one(source.save()))
        return map_range(lambda pair: combine(pair[0], pair[1]), pairs)

    if r is None:
        return apply
    return apply(r)


# --------- infinite iota ----------

class InfiniteIota(RangeBase, capabilities=[RANDOM_ACCESS_RANGE]):
    """
    Unbounded ascending range start, start+1, start+2, ...

    Never empty. Bound it with ``take`` before draining it. Indexing is
    ``front + offset`` and does not move the range.
    """
    is_infinite = True

    def __init__(self, start=0):
        self._value = start

    @property
    def empty(self) -> bool:
        return False

    @property
    def front(self):
        return self._value

    def pop_front(self):
        self._value += 1

    def __getitem__(self, offset):
        return self._value + offset

    def save(self):
        return InfiniteIota(self._value)

    def __repr__(self):
        return f"<InfiniteIota front={self._value!r}>"


def infinite_iota(start=0) -> InfiniteIota:
    return InfiniteIota(start)


# --------- empty range ----------

class EmptyRange(RangeBase, capabilities=[INPUT_RANGE, FORWARD_RANGE, BIDIRECTIONAL_RANGE, RANDOM_ACCESS_RANGE]):
    """Range with no elements that still offers every capability."""

    def __init__(self, element_type: Optional[type] = None):
        self.element_type = element_type

    @property
    def empty(self) -> bool:
        return True

    def __len__(self) -> int:
        return 0

    @property
    def front(self):
        require(False, "front of an EmptyRange")

    def pop_front(self):
        require(False, "pop_front of an EmptyRange")

    @property
    def back(self):
        require(False, "back of an EmptyRange")

    def pop_back(self):
        require(False, "pop_back of an EmptyRange")

    def __getitem__(self, index):
        require(False, f"index {index} into an EmptyRange")

    def save(self):
        return EmptyRange(self.element_type)


def empty_range(element_type: Optional[type] = None) -> EmptyRange:
    return EmptyRange(element_type)


# --------- single-element ranges ----------

class Only(RangeBase, capabilities=[INPUT_RANGE, FORWARD_RANGE, BIDIRECTIONAL_RANGE, RANDOM_ACCESS_RANGE]):
    """Single already-evaluated value."""

    def __init__(self, value):
        self.value = value
        self._empty = False

    @property
    def empty(self) -> bool:
        return self._empty

    @property
    def front(self):
        require(not self._empty, "front of an exhausted Only")
        return self.value

    def pop_front(self):
        require(not self._empty, "pop_front of an exhausted Only")
        self._empty = True

    back = front
    pop_back = pop_front

    def __len__(self) -> int:
        return 0 if self._empty else 1

    def __getitem__(self, index):
        require(not self._empty, "index into an exhausted Only")
        require(index == 0, f"index {index} into a single-element range")
        return self.value

    def save(self):
        copy = Only(self.value)
        copy._empty = self._empty
        return copy


def only(value) -> Only:
    return Only(value)


class OnlyLazy(RangeBase, capabilities=[INPUT_RANGE, FORWARD_RANGE, BIDIRECTIONAL_RANGE, RANDOM_ACCESS_RANGE]):
    """
    Like ``Only``, but the value is produced lazily.

    ``front`` calls the producer every time it is read, until the range is
    popped; nothing is cached. After one pop the range stays empty.
    Copies made with ``save()`` share the producer and evaluate it
    independently.
    """

    def __init__(self, producer: Callable[[], Any]):
        self.producer = producer
        self._empty = False

    @property
    def empty(self) -> bool:
        return self._empty

    @property
    def front(self):
        require(not self._empty, "front of an exhausted OnlyLazy")
        return self.producer()

    def pop_front(self):
        require(not self._empty, "pop_front of an exhausted OnlyLazy")
        self._empty = True

    back = front
    pop_back = pop_front

    def __len__(self) -> int:
        return 0 if self._empty else 1

    def __getitem__(self, index):
        require(not self._empty, "index into an exhausted OnlyLazy")
        require(index == 0, f"index {index} into a single-element range")
        return self.producer()

    def save(self):
        copy = OnlyLazy(self.producer)
        copy._empty = self._empty
        return copy


def only_lazy(producer: Callable[[], Any]) -> OnlyLazy:
    return OnlyLazy(producer)


# --------- deferred construction ----------

class LazyInitRange(RangeBase, capabilities=[INPUT_RANGE]):
    """
    Defers building a range until its first ``empty``/``front``/``pop_front``.

    The constructor runs at most once; afterwards every call goes to the
    range it returned. Side effects of the constructor therefore happen at
    first touch, not here. Pipelines relying on that must pull their
    stages in the intended order; nothing enforces it.
    """

    def __init__(self, constructor: Callable[[], Any]):
        self._constructor = constructor
        self._initialized = False
        self._range = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _get_range(self):
        if not self._initialized:
            logger.debug("Constructing deferred range")
            self._range = as_range(self._constructor())
            self._initialized = True
        return self._range

    @property
    def empty(self) -> bool:
        return self._get_range().empty

    @property
    def front(self):
        return self._get_range().front

    def pop_front(self):
        self._get_range().pop_front()


def lazy_init_range(constructor: Callable[[], Any]) -> LazyInitRange:
    return LazyInitRange(constructor)
