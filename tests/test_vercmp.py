"""Tests for version comparison."""

import pytest

from resolution.models import Comparator
from resolution.vercmp import compare_versions, version_satisfies


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("1.0", "1.0", 0),
        ("1.0", "1.0.0", 0),
        ("1.2", "1.10", -1),
        ("2.0", "1.99", 1),
        ("1.0rc1", "1.0", -1),
        ("2.1.5-git", "2.1.5", 1),
        ("r10", "r9", 1),
    ],
)
def test_compare_versions(a, b, expected):
    assert compare_versions(a, b) == expected


def test_numeric_segment_beats_alpha_segment():
    # neither side is a valid PEP 440 version
    assert compare_versions("1.x.2", "1.2.x") < 0


class TestVersionSatisfies:
    """Test comparator application."""

    def test_any_always_matches(self):
        assert version_satisfies(None, Comparator.ANY, None)
        assert version_satisfies("1.0", Comparator.ANY, "9.9")

    def test_missing_installed_version_fails_constraint(self):
        assert not version_satisfies(None, Comparator.GE, "1.0")

    @pytest.mark.parametrize(
        "compare, want, expected",
        [
            (Comparator.LT, "2.0", True),
            (Comparator.LE, "1.5", True),
            (Comparator.EQ, "1.5", True),
            (Comparator.NE, "1.5", False),
            (Comparator.GE, "1.6", False),
            (Comparator.GT, "1.4", True),
        ],
    )
    def test_operators(self, compare, want, expected):
        assert version_satisfies("1.5", compare, want) is expected
