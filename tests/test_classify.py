"""Tests for filename classification."""

import pytest

from dsplay.routes.classify import classify_file, extract_seq_index


class TestExtractSeqIndex:
    def test_numeric_suffix(self) -> None:
        assert extract_seq_index("step_003") == ("step", 3)

    def test_no_suffix(self) -> None:
        assert extract_seq_index("index") == ("index", -1)

    def test_non_numeric_suffix_is_kept(self) -> None:
        assert extract_seq_index("post_live") == ("post_live", -1)

    def test_only_last_underscore_counts(self) -> None:
        assert extract_seq_index("post_live_012") == ("post_live", 12)

    def test_empty_suffix(self) -> None:
        assert extract_seq_index("index_") == ("index_", -1)

    def test_negative_is_not_an_index(self) -> None:
        assert extract_seq_index("step_-1") == ("step_-1", -1)

    def test_non_ascii_digits_rejected(self) -> None:
        assert extract_seq_index("step_٣") == ("step_٣", -1)


class TestClassifyFile:
    @pytest.mark.parametrize(
        ("stem", "expected"),
        [
            ("index", ("", False, -1)),
            ("get", ("GET", False, -1)),
            ("post", ("POST", False, -1)),
            ("put", ("PUT", False, -1)),
            ("patch", ("PATCH", False, -1)),
            ("delete", ("DELETE", False, -1)),
            ("live", ("", True, -1)),
            ("get_live", ("GET", True, -1)),
            ("post_live_001", ("POST", True, 1)),
            ("live_002", ("", True, 2)),
            ("post_003", ("POST", False, 3)),
            ("index_004", ("", False, 4)),
        ],
    )
    def test_known_stems(self, stem: str, expected: tuple[str, bool, int]) -> None:
        assert classify_file(stem) == expected

    def test_legacy_sse_marker(self) -> None:
        assert classify_file("post_sse") == ("POST", True, -1)
        assert classify_file("sse") == ("", True, -1)

    def test_case_insensitive(self) -> None:
        assert classify_file("POST_Live") == ("POST", True, -1)

    @pytest.mark.parametrize("stem", ["", "_", "about", "head", "get_post", "___", "x_y_z_"])
    def test_unknown_stems_fall_back_to_any_method_html(self, stem: str) -> None:
        method, is_live, _ = classify_file(stem)
        assert method == ""
        assert is_live is False
