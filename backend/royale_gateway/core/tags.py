"""Tag canonicalization shared by cache keys and scope checks."""

from typing import Any, List, Optional

TAG_MARKER = "#"


def normalize_tag(raw: Any) -> Optional[str]:
    """
    Canonicalize a player or clan tag.

    Trims whitespace, uppercases and ensures exactly one leading ``#``.
    Returns None for absent, blank or non-string input instead of raising.

    :param raw: Tag as typed by a user or returned by the API
    :returns: Canonical tag (e.g. ``#ABC123``) or None
    """
    if not isinstance(raw, str):
        return None

    body = raw.strip().upper().lstrip(TAG_MARKER).strip()
    if not body:
        return None

    return f"{TAG_MARKER}{body}"


def same_tag(a: Any, b: Any) -> bool:
    """Compare two raw tags by canonical form. Unusable tags never match."""
    left = normalize_tag(a)
    return left is not None and left == normalize_tag(b)


def parse_tag_list(csv: Optional[str]) -> List[str]:
    """Split a comma-joined tag list, keeping order and duplicates, dropping blanks."""
    if not csv:
        return []

    tags = []
    for part in csv.split(","):
        tag = normalize_tag(part)
        if tag is not None:
            tags.append(tag)
    return tags
