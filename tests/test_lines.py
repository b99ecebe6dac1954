"""Tests for aospscan.lines"""

from aospscan.lines import join_continued_lines


class TestJoinContinuedLines:
    def test_three_physical_lines_become_one(self):
        lines = [
            "LOCAL_C_INCLUDES := a \\",
            "    b \\",
            "    c",
        ]
        assert join_continued_lines(lines) == ["LOCAL_C_INCLUDES := a b c"]

    def test_lines_without_continuation_untouched(self):
        assert join_continued_lines(["A := 1", "B := 2"]) == ["A := 1", "B := 2"]

    def test_joining_stops_at_first_plain_line(self):
        lines = ["A := x \\", "y", "B := z"]
        assert join_continued_lines(lines) == ["A := x y", "B := z"]

    def test_dangling_continuation_flushed(self):
        assert join_continued_lines(["A := x \\"]) == ["A := x"]

    def test_marker_without_space(self):
        assert join_continued_lines(["A := x\\", "y"]) == ["A := x y"]
