"""Tests for change sets and line ranges."""

import pytest

from linemark.core.ranges import LineRange
from linemark.decorations.change_set import ChangeSet, DecorationCategory


class TestChangeSet:
    def test_from_payload_coerces_lists(self) -> None:
        changes = ChangeSet.from_payload({"added": [3, 1], "modified": ["2"]})

        assert changes.added == frozenset({1, 3})
        assert changes.deleted == frozenset()
        assert changes.modified == frozenset({2})

    def test_overlapping_categories(self) -> None:
        changes = ChangeSet(added=[1, 2], modified=[2])

        assert changes.touched() == [1, 2]
        assert changes.categories_for(2) == (DecorationCategory.ADDED, DecorationCategory.MODIFIED)
        assert changes.categories_for(7) == ()

    def test_is_empty(self) -> None:
        assert ChangeSet().is_empty
        assert ChangeSet.from_payload({"added": [], "deleted": [], "modified": []}).is_empty
        assert not ChangeSet(deleted=[0]).is_empty

    def test_payload_round_trip_is_sorted(self) -> None:
        assert ChangeSet(added=[5, 1]).to_payload() == {"added": [1, 5], "deleted": [], "modified": []}

    @pytest.mark.parametrize(
        "payload, error",
        [
            (None, TypeError),
            ([1, 2], TypeError),
            ({"added": "12"}, TypeError),
            ({"added": ["x"]}, ValueError),
            ({"added": [True]}, ValueError),
        ],
    )
    def test_rejects_malformed_payloads(self, payload, error) -> None:
        with pytest.raises(error):
            ChangeSet.from_payload(payload)

    def test_category_tags(self) -> None:
        assert DecorationCategory.DELETED.tag("cline") == "cline-deleted-line"


class TestLineRange:
    def test_payload_shape(self) -> None:
        assert LineRange(1, 0, 2, 4).to_payload() == {
            "startLine": 1,
            "startChar": 0,
            "endLine": 2,
            "endChar": 4,
        }

    def test_reversed_bounds_are_swapped(self) -> None:
        assert LineRange(3, 1, 1, 2) == LineRange(1, 2, 3, 1)

    def test_negative_values_clamp_to_zero(self) -> None:
        assert LineRange(-1, -5, 0, 1).to_tuple() == (0, 0, 0, 1)

    def test_sequence_protocol(self) -> None:
        span = LineRange(0, 1, 2, 3)

        assert list(span) == [0, 1, 2, 3]
        assert span[2] == 2
        assert span[1:3] == (1, 2)
        assert span.line_count == 3
        assert list(span.lines) == [0, 1, 2]
        with pytest.raises(IndexError):
            span[4]
