"""Version comparison for dependency constraints."""

import re
from typing import List, Optional

from packaging import version

from .models import Comparator

_SEGMENT_RE = re.compile(r"(\d+|[A-Za-z]+)")


def _segments(text: str) -> List[str]:
    """Split a version into alternating numeric/alphabetic segments."""
    return _SEGMENT_RE.findall(text)


def _segment_compare(a: str, b: str) -> int:
    """rpm-style comparison for versions packaging cannot parse."""
    seg_a, seg_b = _segments(a), _segments(b)
    for left, right in zip(seg_a, seg_b):
        left_num, right_num = left.isdigit(), right.isdigit()
        if left_num and right_num:
            diff = int(left) - int(right)
            if diff:
                return 1 if diff > 0 else -1
            continue
        # numeric segments are newer than alphabetic ones
        if left_num != right_num:
            return 1 if left_num else -1
        if left != right:
            return 1 if left > right else -1
    if len(seg_a) != len(seg_b):
        return 1 if len(seg_a) > len(seg_b) else -1
    return 0


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        Negative, zero or positive as ``a`` is older, equal or newer than ``b``.
    """
    if a == b:
        return 0
    try:
        left, right = version.Version(a), version.Version(b)
    except version.InvalidVersion:
        return _segment_compare(a, b)
    return (left > right) - (left < right)


def version_satisfies(have: Optional[str], compare: Comparator, want: Optional[str]) -> bool:
    """Check ``have`` against the constraint ``compare want``."""
    if compare is Comparator.ANY or want is None:
        return True
    if have is None:
        return False

    result = compare_versions(have, want)
    if compare is Comparator.LT:
        return result < 0
    if compare is Comparator.LE:
        return result <= 0
    if compare is Comparator.EQ:
        return result == 0
    if compare is Comparator.NE:
        return result != 0
    if compare is Comparator.GE:
        return result >= 0
    return result > 0
