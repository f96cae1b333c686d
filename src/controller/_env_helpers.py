from __future__ import annotations


def parse_float(v: str | None, *, default: float) -> float:
    if not v:
        return default
    try:
        return float(v.strip())
    except ValueError:
        return default
