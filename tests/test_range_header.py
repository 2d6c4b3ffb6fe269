"""Unit tests for ContentRange bounds, constraint resolution and formatting."""

import pytest

from httpext.errors import (
    RangeFormatError,
    RangeInvalid,
    RangeIsSuffix,
    RangeOutsideConstraints,
    RangeUnsatisfiableZeroLength,
)
from httpext.range_header import RANGE_UNCONSTRAINED, ContentRange, format_unsatisfied


class TestBounds:
    """Tests for set_first() / set_last() and the constructor."""

    def test_new_range_is_unbound(self):
        rng = ContentRange("bytes")
        assert rng.units == "bytes"
        assert rng.first == RANGE_UNCONSTRAINED
        assert rng.last == RANGE_UNCONSTRAINED
        assert rng.total == RANGE_UNCONSTRAINED

    def test_constructor_binds_both(self):
        rng = ContentRange("resources", 10, 20)
        assert rng.first == 10
        assert rng.last == 20
        assert rng.is_fixed

    def test_constructor_rejects_inverted_range(self):
        with pytest.raises(RangeInvalid):
            ContentRange("resources", 20, 10)

    def test_set_last_below_first_rejected(self):
        rng = ContentRange("resources", first=10)
        with pytest.raises(RangeInvalid):
            rng.set_last(9)

    def test_set_first_above_last_rejected(self):
        """Order of the two calls does not matter for first <= last."""
        rng = ContentRange("resources")
        rng.set_last(9)
        with pytest.raises(RangeInvalid):
            rng.set_first(10)

    def test_set_first_equal_to_last_accepted(self):
        """A single-element range may be built last-first.

        set_first only rejects first > last, so first == last is allowed.
        """
        rng = ContentRange("resources")
        rng.set_last(5)
        rng.set_first(5)
        assert (rng.first, rng.last) == (5, 5)

    def test_set_last_equal_to_first_accepted(self):
        rng = ContentRange("resources", first=5)
        rng.set_last(5)
        assert rng.limit == 0

    def test_negative_first_rejected(self):
        with pytest.raises(RangeIsSuffix):
            ContentRange("resources", first=-1)

    def test_negative_last_is_suffix_marker(self):
        rng = ContentRange("resources", last=-100)
        assert rng.is_suffix
        assert rng.last == -100

    def test_failed_mutation_leaves_range_unchanged(self):
        rng = ContentRange("resources", 10, 20)
        with pytest.raises(RangeInvalid):
            rng.set_last(5)
        assert (rng.first, rng.last) == (10, 20)


class TestPredicates:
    """Tests for offset, limit, the shape predicates and contains()."""

    def test_suffix(self):
        rng = ContentRange("resources", last=-100)
        assert rng.is_suffix
        assert rng.is_unbounded
        assert not rng.is_fixed
        assert not rng.is_full_range
        assert rng.offset == RANGE_UNCONSTRAINED
        assert rng.limit == 100

    def test_open_ended(self):
        rng = ContentRange("resources", first=100)
        assert not rng.is_suffix
        assert rng.is_unbounded
        assert not rng.is_fixed
        assert rng.offset == 100
        assert rng.limit == RANGE_UNCONSTRAINED

    def test_fixed(self):
        rng = ContentRange("resources", 100, 199)
        assert rng.is_fixed
        assert not rng.is_unbounded
        assert rng.offset == 100
        assert rng.limit == 99

    def test_full_range(self):
        assert ContentRange("resources", first=0).is_full_range
        assert not ContentRange("resources", first=1).is_full_range
        assert not ContentRange("resources", 0, 10).is_full_range

    def test_contains_fixed(self):
        rng = ContentRange("resources", 10, 20)
        assert rng.contains(10)
        assert rng.contains(15)
        assert rng.contains(20)
        assert not rng.contains(9)
        assert not rng.contains(21)

    def test_contains_requires_both_bounds(self):
        assert not ContentRange("resources", first=10).contains(15)
        assert not ContentRange("resources", last=-10).contains(5)

    def test_contains_negative_offset(self):
        rng = ContentRange("resources", 0, 20)
        assert rng.contains(-20)
        assert not rng.contains(-21)

    def test_contains_negative_offset_requires_first(self):
        assert not ContentRange("resources", last=-10).contains(-5)


class TestConstrain:
    """Tests for constrain() against a known collection size."""

    @pytest.mark.parametrize(
        "first,last,size",
        [(0, 0, 1), (0, 9, 10), (3, 7, 10), (9, 9, 10), (100, 199, 200)],
    )
    def test_fixed_within_size_is_noop(self, first, last, size):
        rng = ContentRange("resources", first, last)
        rng.constrain(size)
        assert (rng.first, rng.last) == (first, last)

    def test_suffix_resolves_against_size(self):
        rng = ContentRange("resources", last=-100)
        rng.constrain(200)
        assert (rng.first, rng.last) == (100, 199)
        assert rng.is_fixed

    def test_suffix_longer_than_collection_clamped(self):
        rng = ContentRange("resources", last=-500)
        rng.constrain(200)
        assert (rng.first, rng.last) == (0, 199)

    def test_open_ended_runs_to_end(self):
        rng = ContentRange("resources", first=100)
        rng.constrain(300)
        assert (rng.first, rng.last) == (100, 299)

    def test_last_past_end_clamped(self):
        rng = ContentRange("bytes", 50, 200)
        rng.constrain(100)
        assert (rng.first, rng.last) == (50, 99)

    def test_first_past_end_rejected(self):
        rng = ContentRange("resources", first=100)
        with pytest.raises(RangeOutsideConstraints):
            rng.constrain(100)

    def test_fixed_first_past_end_rejected(self):
        rng = ContentRange("resources", 300, 400)
        with pytest.raises(RangeOutsideConstraints):
            rng.constrain(200)

    def test_zero_size_suffix_is_empty(self):
        rng = ContentRange("resources", last=-100)
        rng.constrain(0)
        assert rng.limit == 0
        assert rng.last == 0
        assert rng.is_empty
        assert rng.total == RANGE_UNCONSTRAINED
        assert rng.format() == "resources */*"

    def test_zero_size_suffix_constrained_twice(self):
        rng = ContentRange("resources", last=-100)
        rng.constrain(0)
        rng.constrain(0)
        assert rng.last == 0
        assert rng.limit == 0
        assert rng.is_empty

    def test_rebinding_clears_empty(self):
        rng = ContentRange("resources", last=-100)
        rng.constrain(0)
        rng.set_last(-5)
        assert not rng.is_empty
        rng.constrain(10)
        assert (rng.first, rng.last) == (5, 9)

    def test_zero_size_bound_first_rejected(self):
        rng = ContentRange("resources", first=0)
        with pytest.raises(RangeUnsatisfiableZeroLength):
            rng.constrain(0)

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            ContentRange("resources", first=0).constrain(-1)

    def test_unbound_range_covers_collection(self):
        rng = ContentRange("resources")
        rng.constrain(10)
        assert (rng.first, rng.last) == (0, 9)

    def test_last_only_runs_from_start(self):
        rng = ContentRange("resources", last=20)
        rng.constrain(10)
        assert (rng.first, rng.last) == (0, 9)

    def test_idempotent(self):
        for rng in (
            ContentRange("resources", last=-10),
            ContentRange("resources", first=5),
            ContentRange("resources", 2, 8),
        ):
            rng.constrain(50)
            before = (rng.first, rng.last)
            rng.constrain(50)
            assert (rng.first, rng.last) == before

    def test_error_leaves_total_unset(self):
        rng = ContentRange("resources", first=100)
        with pytest.raises(RangeOutsideConstraints):
            rng.set_total(50)
        assert rng.total == RANGE_UNCONSTRAINED
        assert rng.last == RANGE_UNCONSTRAINED


class TestFormat:
    """Tests for format() and format_unsatisfied()."""

    def test_fixed_without_total(self):
        assert ContentRange("resources", 100, 199).format() == "resources 100-199/*"

    def test_fixed_with_total(self):
        rng = ContentRange("resources", 100, 199)
        rng.set_total(200)
        assert rng.format() == "resources 100-199/200"

    @pytest.mark.parametrize("first,last,size", [(0, 0, 1), (0, 99, 100), (5, 9, 1000)])
    def test_fixed_round_trip(self, first, last, size):
        rng = ContentRange("bytes", first, last)
        rng.set_total(size)
        assert rng.format() == f"bytes {first}-{last}/{size}"

    def test_unbound_renders_star(self):
        assert ContentRange("resources").format() == "resources */*"

    def test_suffix_requires_resolution(self):
        rng = ContentRange("resources", last=-100)
        with pytest.raises(RangeFormatError):
            rng.format()
        rng.set_total(200)
        assert rng.format() == "resources 100-199/200"

    def test_open_ended_requires_resolution(self):
        rng = ContentRange("resources", first=100)
        with pytest.raises(RangeFormatError):
            rng.format()
        rng.set_total(300)
        assert rng.format() == "resources 100-299/300"

    def test_empty_suffix_renders_star_zero(self):
        rng = ContentRange("resources", last=-10)
        rng.set_total(0)
        assert rng.is_empty
        assert rng.format() == "resources */0"

    def test_format_unsatisfied(self):
        assert format_unsatisfied("bytes", 1234) == "bytes */1234"


class TestSlicing:
    """Tests for as_slice()."""

    def test_slice_of_resolved_range(self):
        items = list(range(10))
        rng = ContentRange("resources", last=-3)
        rng.set_total(len(items))
        assert items[rng.as_slice()] == [7, 8, 9]

    def test_slice_of_empty_range(self):
        rng = ContentRange("resources", last=-3)
        rng.set_total(0)
        assert [][rng.as_slice()] == []

    def test_slice_after_constrain_to_empty(self):
        """constrain(0) alone, without set_total, resolves a suffix to empty."""
        rng = ContentRange("resources", last=-3)
        rng.constrain(0)
        assert rng.as_slice() == slice(0, 0)

    def test_slice_requires_resolution(self):
        with pytest.raises(RangeFormatError):
            ContentRange("resources", first=3).as_slice()


class TestValueSemantics:
    def test_equality(self):
        assert ContentRange("bytes", 0, 9) == ContentRange("bytes", 0, 9)
        assert ContentRange("bytes", 0, 9) != ContentRange("items", 0, 9)
        assert ContentRange("bytes", 0, 9) != ContentRange("bytes", 0, 8)

    def test_repr(self):
        assert repr(ContentRange("bytes", 0, 9)) == (
            "ContentRange(units='bytes', first=0, last=9, total=-1)"
        )
