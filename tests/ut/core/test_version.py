"""版本标签解析与排序"""

from __future__ import annotations

import pytest

from ppm.core.exceptions import ParseError
from ppm.core.version import (
    Ordering,
    Version,
    compare,
    format_tag,
    latest_version,
    parse_tag,
    parse_tags,
)


class TestParse:
    def test_basic(self) -> None:
        assert parse_tag("V1.2.3") == Version(1, 2, 3)

    def test_large_components(self) -> None:
        assert parse_tag("V10.200.3000") == Version(10, 200, 3000)

    @pytest.mark.parametrize("tag", [
        "1.2.3", "v1.2.3", "V1.2", "V1.2.3.4", "V1.2.3-rc1", "V1.2.3+build",
        "V-1.2.3", "V1..3", " V1.2.3", "V1.2.3\n", "not-a-version", "",
    ])
    def test_rejects_other_shapes(self, tag: str) -> None:
        with pytest.raises(ParseError, match="不是版本标签"):
            parse_tag(tag)

    def test_leading_zeros_are_plain_integers(self) -> None:
        assert parse_tag("V01.002.0") == Version(1, 2, 0)

    def test_round_trip(self) -> None:
        for v in (Version(0, 0, 0), Version(1, 2, 3), Version(12, 0, 99)):
            assert parse_tag(format_tag(v)) == v

    def test_negative_component_rejected(self) -> None:
        with pytest.raises(ValueError):
            Version(1, -1, 0)


class TestCompare:
    def test_lt(self) -> None:
        assert compare(Version(1, 2, 3), Version(1, 3, 0)) is Ordering.LT

    def test_gt(self) -> None:
        assert compare(Version(2, 0, 0), Version(1, 9, 9)) is Ordering.GT

    def test_eq(self) -> None:
        assert compare(Version(1, 0, 0), parse_tag("V1.0.0")) is Ordering.EQ

    def test_consistent_with_tuple_order(self) -> None:
        vs = [Version(1, 10, 0), Version(1, 2, 0), Version(0, 9, 9), Version(1, 2, 10)]
        assert sorted(vs) == sorted(vs, key=lambda v: v.as_tuple())
        assert [str(v) for v in sorted(vs)] == ["0.9.9", "1.2.0", "1.2.10", "1.10.0"]


class TestLatest:
    def test_ignores_non_version_tags(self) -> None:
        tags = ["V1.0.0", "V1.2.0", "not-a-version", "V1.2.1"]
        assert latest_version(tags) == Version(1, 2, 1)

    def test_duplicates_collapse(self) -> None:
        assert parse_tags(["V1.0.0", "V01.0.0", "V1.00.0"]) == {Version(1, 0, 0)}

    def test_no_versions(self) -> None:
        assert latest_version(["latest", "release"]) is None
        assert latest_version([]) is None
