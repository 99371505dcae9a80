import re

__all__ = ["parse_bool", "parse_selection"]

_SPAN_RE = re.compile(r"^(\d+)-(\d+)$")


def parse_bool(text: str) -> bool:
    val = text.strip().lower()
    if val in {"true", "yes", "y", "1", "on"}:
        return True
    if val in {"false", "no", "n", "0", "off"}:
        return False
    raise ValueError(f"Expected true or false, got '{text}'")


def parse_selection(text: str) -> list[int]:
    """Parse 1-based picks like '1 3, 5-7' into positions, first occurrence order.

    Tokens that are neither a number nor a span are ignored, as are
    reversed or zero-based spans.
    """
    picks: list[int] = []
    for token in text.replace(",", " ").split():
        if token.isdigit():
            n = int(token)
            if n > 0 and n not in picks:
                picks.append(n)
            continue
        m = _SPAN_RE.match(token)
        if not m:
            continue
        lo, hi = int(m.group(1)), int(m.group(2))
        if lo < 1 or hi < lo:
            continue
        picks.extend(n for n in range(lo, hi + 1) if n not in picks)
    return picks
