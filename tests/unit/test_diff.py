"""Unit tests for the line diff used by the revision log."""

from wikigraph.services.revisions import DiffKind, DiffSegment, diff_lines


def rebuild(segments: list[DiffSegment], keep: set[DiffKind]) -> str:
    return "".join(s.text for s in segments if s.kind in keep)


class TestDiffLines:
    """Tests for diff_lines."""

    def test_identical_texts_are_all_unchanged(self) -> None:
        text = "line one\nline two\nline three\n"
        segments = diff_lines(text, text)

        assert segments == [DiffSegment(text=text, kind=DiffKind.UNCHANGED, count=3)]

    def test_empty_baseline_is_everything_added(self) -> None:
        segments = diff_lines("", "a\nb\n")
        assert segments == [DiffSegment(text="a\nb\n", kind=DiffKind.ADDED, count=2)]

    def test_none_is_treated_as_empty(self) -> None:
        assert diff_lines(None, None) == []
        assert diff_lines("x\n", None) == [
            DiffSegment(text="x\n", kind=DiffKind.REMOVED, count=1)
        ]

    def test_added_line_in_the_middle(self) -> None:
        segments = diff_lines("a\nc\n", "a\nb\nc\n")

        assert [s.kind for s in segments] == [
            DiffKind.UNCHANGED,
            DiffKind.ADDED,
            DiffKind.UNCHANGED,
        ]
        assert segments[1].text == "b\n"

    def test_replaced_block_is_removed_then_added(self) -> None:
        segments = diff_lines("a\nold\nc\n", "a\nnew\nc\n")

        assert [(s.kind, s.text) for s in segments] == [
            (DiffKind.UNCHANGED, "a\n"),
            (DiffKind.REMOVED, "old\n"),
            (DiffKind.ADDED, "new\n"),
            (DiffKind.UNCHANGED, "c\n"),
        ]

    def test_adjacent_segments_of_same_kind_are_merged(self) -> None:
        segments = diff_lines("x\ny\n", "")
        assert segments == [DiffSegment(text="x\ny\n", kind=DiffKind.REMOVED, count=2)]

        for first, second in zip(segments, segments[1:]):
            assert first.kind != second.kind

    def test_segments_reconstruct_both_texts(self) -> None:
        old = "# Title\n\nintro\nbody line\nfooter\n"
        new = "# New title\n\nintro\nbody line\nextra\nfooter"

        segments = diff_lines(old, new)

        assert rebuild(segments, {DiffKind.UNCHANGED, DiffKind.ADDED}) == new
        assert rebuild(segments, {DiffKind.UNCHANGED, DiffKind.REMOVED}) == old

    def test_missing_final_newline_is_a_change(self) -> None:
        segments = diff_lines("a\nb\n", "a\nb")

        assert segments[0] == DiffSegment(text="a\n", kind=DiffKind.UNCHANGED, count=1)
        assert {s.kind for s in segments[1:]} == {DiffKind.REMOVED, DiffKind.ADDED}

    def test_counts_match_lines(self) -> None:
        segments = diff_lines("1\n2\n3\n", "1\n4\n5\n6\n3\n")

        added = sum(s.count for s in segments if s.kind == DiffKind.ADDED)
        removed = sum(s.count for s in segments if s.kind == DiffKind.REMOVED)
        assert (added, removed) == (3, 1)

    def test_to_dict(self) -> None:
        segment = DiffSegment(text="a\n", kind=DiffKind.ADDED, count=1)
        assert segment.to_dict() == {"text": "a\n", "kind": "added", "count": 1}
