"""Query sources for batch mode."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


def iter_queries(lines: Iterable[str]) -> Iterator[str]:
    """Yield one query per line until the first blank line or end of input."""
    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            return
        yield line
