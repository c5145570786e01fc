"""Unified diffs between stored document revisions"""

import difflib


def diff_summary(old: str, new: str) -> dict[str, int]:
    """Return added/deleted/unchanged line counts. Useful for compact change stats."""
    old_lines, new_lines = old.splitlines(), new.splitlines()
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines)
    added = deleted = unchanged = 0

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            unchanged += i2 - i1
        elif tag == "replace":
            deleted += i2 - i1
            added += j2 - j1
        elif tag == "insert":
            added += j2 - j1
        elif tag == "delete":
            deleted += i2 - i1

    return {"added": added, "deleted": deleted, "unchanged": unchanged}


def unified_diff(
    old: str,
    new: str,
    from_label: str = "saved",
    to_label: str = "current",
    context: int = 3,
    ) -> str:
    """Return a unified diff of old -> new as one string; empty when identical."""
    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)
    return "".join(
        difflib.unified_diff(old_lines, new_lines, fromfile=from_label, tofile=to_label, n=context)
    )
