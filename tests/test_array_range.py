import pytest

from lazyranges.contracts import PreconditionViolation, is_random_access_range, is_bidirectional_range
from lazyranges.ranges import (
    CheckedArrayRange,
    UncheckedArrayRange,
    fast_array_range,
    ptr_slice,
)


class TestArrayRange:
    """Test the pointer-pair array range"""

    def test_matches_direct_indexing(self):
        """Test that traversal yields the block front to back"""
        block = [5, 3, 8, 1, 9]
        r = fast_array_range(block, checked=True)
        seen = []
        while not r.empty:
            seen.append(r.front)
            r.pop_front()
        assert seen == [block[i] for i in range(len(block))], f"Unexpected traversal: {seen}"

    def test_unchecked_matches_checked(self):
        """Test that both modes produce the same elements"""
        block = list("abcdef")
        assert list(fast_array_range(block, checked=False)) == list(fast_array_range(block, checked=True))

    def test_factory_selects_class(self):
        """Test that the checked flag picks the implementation class"""
        assert isinstance(fast_array_range([1], checked=True), CheckedArrayRange)
        assert isinstance(fast_array_range([1], checked=False), UncheckedArrayRange)

    def test_empty_block(self):
        """Test a range over an empty block"""
        r = fast_array_range([], checked=True)
        assert r.empty
        assert len(r) == 0
        assert list(r) == []

    def test_length_tracks_position(self):
        """Test that len is end minus ptr"""
        r = fast_array_range([1, 2, 3, 4], checked=True)
        assert len(r) == 4
        r.pop_front()
        r.pop_back()
        assert len(r) == 2
        assert r.front == 2 and r.back == 3

    def test_save_is_independent(self):
        """Test that advancing a saved copy leaves the original in place"""
        r = fast_array_range([10, 20, 30], checked=True)
        s = r.save()
        s.pop_front()
        s.pop_front()
        assert r.front == 10, f"Original moved to {r.front}"
        assert s.front == 30

    def test_iteration_does_not_consume(self):
        """Test that iterating walks a copy"""
        r = fast_array_range([1, 2, 3], checked=True)
        assert list(r) == [1, 2, 3]
        assert list(r) == [1, 2, 3]
        assert r.front == 1

    def test_indexing_is_relative_to_position(self):
        """Test that r[i] is offset from the current front"""
        r = fast_array_range([0, 1, 2, 3, 4], checked=True)
        r.pop_front()
        assert r[0] == 1
        assert r[3] == 4

    def test_slicing(self):
        """Test sub-range extraction by offsets"""
        block = [0, 1, 2, 3, 4, 5]
        r = fast_array_range(block, checked=True)
        r.pop_front()
        assert r[1:3] == [2, 3]
        assert r[:] == [1, 2, 3, 4, 5]
        assert r[2:2] == []
        assert r.slice() == [1, 2, 3, 4, 5]
        assert ptr_slice(block, 2, 4) == [2, 3]

    def test_aliases_block(self):
        """Test that the range sees in-place changes to the block"""
        block = [1, 2, 3]
        r = fast_array_range(block, checked=True)
        block[0] = 100
        assert r.front == 100

    def test_end_is_snapshotted(self):
        """Test that elements appended after construction are not part of the range"""
        block = [1, 2]
        r = fast_array_range(block, checked=True)
        block.append(3)
        assert list(r) == [1, 2]

    def test_capabilities(self):
        """Test both classes declare random access and bidirectional traversal"""
        for r in (fast_array_range([1], checked=True), fast_array_range([1], checked=False)):
            assert is_random_access_range(r)
            assert is_bidirectional_range(r)


class TestArrayRangeChecks:
    """Test precondition checks of the checked array range"""

    def test_front_of_empty(self):
        r = fast_array_range([], checked=True)
        with pytest.raises(PreconditionViolation):
            r.front

    def test_pop_front_of_empty(self):
        r = fast_array_range([1], checked=True)
        r.pop_front()
        with pytest.raises(PreconditionViolation):
            r.pop_front()

    def test_back_of_empty(self):
        r = fast_array_range([], checked=True)
        with pytest.raises(PreconditionViolation):
            r.back
        with pytest.raises(PreconditionViolation):
            r.pop_back()

    def test_index_out_of_bounds(self):
        """Test indexing past the remaining length"""
        r = fast_array_range([1, 2, 3], checked=True)
        r.pop_front()
        with pytest.raises(PreconditionViolation):
            r[2]
        with pytest.raises(PreconditionViolation):
            r[-1]

    def test_slice_out_of_bounds(self):
        r = fast_array_range([1, 2, 3], checked=True)
        with pytest.raises(PreconditionViolation):
            r[2:1]
        with pytest.raises(PreconditionViolation):
            r[0:4]
        with pytest.raises(PreconditionViolation):
            r[::2]

    def test_violation_is_an_assertion(self):
        """Test that precondition violations are assertion-style errors"""
        r = fast_array_range([], checked=True)
        with pytest.raises(AssertionError):
            r.front

    def test_unchecked_does_not_check(self):
        """Test that the unchecked range performs no bounds check of its own"""
        block = [1, 2, 3]
        r = fast_array_range(block, checked=False)
        r.pop_back()
        # Reads past the logical end go straight to the block
        assert r[2] == 3
