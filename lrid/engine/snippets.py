# lrid/engine/snippets.py
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from .instrument import SnippetPolicy

ELLIPSIS = "..."


def first_keyword_hit(text: str, keywords: Iterable[str]) -> Optional[Tuple[int, str]]:
    """Earliest (position, keyword) of any keyword in `text`, case-insensitive."""
    lowered = text.lower()
    best: Optional[Tuple[int, str]] = None
    for kw in keywords:
        k = kw.lower().strip()
        if not k:
            continue
        pos = lowered.find(k)
        if pos >= 0 and (best is None or pos < best[0]):
            best = (pos, kw)
    return best


def extract_snippet(text: str, keywords: Iterable[str], policy: SnippetPolicy) -> str:
    """
    Bounded evidence window around the first keyword hit, or the leading slice
    when no keyword is found. The result, ellipses included, never exceeds
    policy.max_length, and the matched keyword is always kept inside it.
    """
    clean = " ".join(str(text or "").split())
    hit = first_keyword_hit(clean, keywords)

    if hit is None:
        if len(clean) <= policy.max_length:
            return clean
        return clean[: policy.max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS

    pos, kw = hit
    n = len(clean)
    kw_end = pos + len(kw.strip())
    start = max(0, pos - policy.before)
    end = min(n, max(pos + policy.after, kw_end))

    # Shrink the right edge first, then the left, never past the keyword.
    while True:
        avail = policy.max_length
        avail -= len(ELLIPSIS) if start > 0 else 0
        avail -= len(ELLIPSIS) if end < n else 0
        if end - start <= avail:
            break
        if end > kw_end:
            end = max(kw_end, start + avail)
        elif start < pos:
            start = min(pos, end - avail)
        else:
            # keyword alone is longer than the budget
            end = start + policy.max_length - len(ELLIPSIS) * (2 if start > 0 else 1)
            break

    left = ELLIPSIS if start > 0 else ""
    right = ELLIPSIS if end < n else ""
    return left + clean[start:end] + right
