from __future__ import annotations

from typing import Callable, List


def wrap_title(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy wrap into at most 2 lines.

    Line 1 takes words while they fit (always at least the first word). Every
    remaining word goes to line 2, even when line 2 overflows: nothing is
    dropped silently.
    """
    text = (text or "").strip()
    if not text:
        return [""]
    if measure(text) <= max_width:
        return [text]

    words = text.split()
    line1 = ""
    rest: List[str] = []
    split = False
    for w in words:
        candidate = f"{line1} {w}" if line1 else w
        if not split and (not line1 or measure(candidate) <= max_width):
            line1 = candidate
        else:
            split = True
            rest.append(w)

    if rest:
        return [line1, " ".join(rest)]
    return [line1]


def wrap_lines(
    text: str,
    max_width: float,
    measure: Callable[[str], float],
    max_lines: int = 3,
) -> List[str]:
    """
    Greedy word wrap, at most max_lines lines.

    Words past the last line are dropped (used for the reason block, which
    has a fixed box).
    """
    words = (text or "").split()
    if not words or max_lines <= 0:
        return []

    lines: List[str] = []
    cur = ""
    for w in words:
        candidate = f"{cur} {w}" if cur else w
        if not cur or measure(candidate) <= max_width:
            cur = candidate
            continue
        if len(lines) == max_lines - 1:
            # last line is full
            break
        lines.append(cur)
        cur = w

    lines.append(cur)
    return lines
