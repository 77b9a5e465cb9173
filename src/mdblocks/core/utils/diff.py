"""Line diffs between two page texts"""

import difflib


def diff_summary(old: str, new: str) -> dict[str, int]:
    """Count added/deleted/unchanged lines between old and new."""
    matcher = difflib.SequenceMatcher(None, old.splitlines(), new.splitlines())
    counts = {"added": 0, "deleted": 0, "unchanged": 0}

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            counts["unchanged"] += i2 - i1
            continue
        if tag in ("replace", "delete"):
            counts["deleted"] += i2 - i1
        if tag in ("replace", "insert"):
            counts["added"] += j2 - j1

    return counts


def unified_diff(old: str, new: str, from_label: str = "before", to_label: str = "after", context: int = 3) -> list[str]:
    """Unified diff lines (newline-terminated) from old to new; empty when identical."""
    return list(difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=from_label,
        tofile=to_label,
        n=context,
    ))
