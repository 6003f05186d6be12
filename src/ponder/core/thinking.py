"""Helpers for `<think>` delimited reasoning text."""

from __future__ import annotations

import re

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"

_LEADING_OPEN_RE = re.compile(r"^\s*" + re.escape(THINK_OPEN))


def strip_thought(text: str) -> str:
    """Extract the thought from one reasoning response.

    A single leading ``<think>`` is removed (leading whitespace is tolerated) and
    everything from the first ``</think>`` onward is dropped. Missing delimiters
    are not an error: the remaining text is the thought. The result is trimmed, so
    stripping already-stripped text returns it unchanged.
    """
    thought = _LEADING_OPEN_RE.sub("", text, count=1)
    close_at = thought.find(THINK_CLOSE)
    if close_at != -1:
        thought = thought[:close_at]
    return thought.strip()


def wrap_thought(thought: str) -> str:
    return f"{THINK_OPEN}{thought}{THINK_CLOSE}"
