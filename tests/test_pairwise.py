import operator
import pytest

from lazyranges.contracts import has_length, is_forward_range, is_input_range
from lazyranges.ranges import (
    pairwise,
    binary_fun,
    fast_array_range,
    infinite_iota,
    empty_range,
    only,
    take,
    IteratorRange,
)


class TestPairwise:
    """Test the pairwise combinator"""

    def test_sum_of_pairs(self):
        assert list(pairwise("a+b")([1, 2, 3])) == [3, 5]

    def test_reversed_difference(self):
        assert list(pairwise("b-a")([1, 2, 3])) == [1, 1]

    def test_callable_function(self):
        assert list(pairwise(operator.mul, [2, 3, 4])) == [6, 12]

    @pytest.mark.parametrize("source", [[], [7], empty_range(), only(7)])
    def test_short_inputs_are_empty(self, source):
        """Test that 0 or 1 elements yield an empty range"""
        r = pairwise("a+b", source)
        assert r.empty
        assert list(r) == []

    def test_length_is_one_less(self):
        data = list(range(10))
        assert len(list(pairwise("a-b", data))) == len(data) - 1

    def test_len_without_draining(self):
        """Test that pairwise over a sized source reports its length up front"""
        r = pairwise("a+b", [1, 2, 3])
        assert len(r) == 2, "Three elements should give two pairs"
        assert list(r) == [3, 5]

    @pytest.mark.parametrize("source", [[], [7], empty_range(), only(7)])
    def test_len_of_short_inputs(self, source):
        assert len(pairwise("a+b", source)) == 0, "Fewer than two elements should give no pairs"

    def test_no_len_over_infinite_input(self):
        assert not has_length(pairwise("a+b", infinite_iota(0)))

    def test_lazy_per_element(self):
        """Test that the combining function only runs when elements are read"""
        calls = []

        def combine(a, b):
            calls.append((a, b))
            return a + b

        r = pairwise(combine, [1, 2, 3, 4])
        assert calls == [], "Nothing should be computed at construction"
        r.pop_front()
        assert calls == [], "Advancing should not compute"
        assert r.front == 5
        assert calls == [(2, 3)]

    def test_does_not_consume_input(self):
        source = fast_array_range([1, 2, 3], checked=True)
        list(pairwise("a+b", source))
        assert source.front == 1
        assert len(source) == 3

    def test_restartable_for_forward_input(self):
        r = pairwise("a+b", [1, 2, 3, 4])
        assert is_forward_range(r)
        s = r.save()
        s.pop_front()
        assert r.front == 3
        assert s.front == 5

    def test_infinite_input(self):
        """Test pairwise over an unbounded range bounded afterwards"""
        assert list(take(pairwise("a+b", infinite_iota(0)), 4)) == [1, 3, 5, 7]

    def test_input_only_source_rejected(self):
        with pytest.raises(TypeError):
            pairwise("a+b", IteratorRange(iter([1, 2, 3])))

    def test_adapter_reusable(self):
        """Test that pairwise(fn) can be applied to several ranges"""
        diffs = pairwise("b-a")
        assert list(diffs([1, 4, 9])) == [3, 5]
        assert list(diffs([10, 5])) == [-5]
        assert is_input_range(diffs([1, 2]))


class TestBinaryFun:
    """Test binary function shorthands"""

    def test_shorthands(self):
        assert binary_fun("a+b")(2, 3) == 5
        assert binary_fun("a-b")(2, 3) == -1
        assert binary_fun("b-a")(2, 3) == 1
        assert binary_fun("a*b")(2, 3) == 6
        assert binary_fun("max")(2, 3) == 3
        assert binary_fun("min")(2, 3) == 2

    def test_callable_passthrough(self):
        assert binary_fun(operator.add) is operator.add

    def test_unknown_shorthand(self):
        with pytest.raises(ValueError):
            binary_fun("a/b")
