"""Authenticity analysis of a document's edit history.

Scores how much of the added text arrived at a humanly possible typing speed.
Pure function: no I/O, never raises on well-formed history.
"""

import math
from typing import Any, Iterable, List

from ..schemas.authenticity import AuthenticityFlag, AuthenticityResult
from .history_utils import elapsed_ms, entry_field, sort_chronologically

WPS_THRESHOLD = 3
"""Words per second (~180 WPM); faster than any human typist."""

SKIP_TRIGGERS = frozenset({"restore", "baseline", "submit"})
"""Non-typing events; intervals ending in one of these are ignored."""


def _round_half_up(value: float, digits: int = 0):
    # Halves round up (2.5 -> 3), unlike the built-in banker's rounding.
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5)
    return rounded if digits == 0 else rounded / scale


def analyze_authenticity(entries: Iterable[Any]) -> AuthenticityResult:
    """
    Compute the authenticity score and flags for one document's history.

    score = organic words / (organic + suspicious words) x 100, where
    suspicious words are typed faster than WPS_THRESHOLD. Pasted words
    (capped at the interval's word growth) count toward neither total: they
    are reported as ``paste`` flags for review but never lower the score,
    since students often paste from their own drafts.

    Args:
        entries: History entries of one document, in any order.

    Returns:
        AuthenticityResult; score is None when fewer than two entries exist
        or no words were added outside skipped and pasted intervals.
    """
    ordered = sort_chronologically(entries)
    if len(ordered) < 2:
        return AuthenticityResult(score=None, flags=[])

    organic = 0
    suspicious = 0
    flags: List[AuthenticityFlag] = []

    for previous, current in zip(ordered, ordered[1:]):
        if entry_field(current, "trigger") in SKIP_TRIGGERS:
            continue

        word_delta = (entry_field(current, "word_count") or 0) - (entry_field(previous, "word_count") or 0)
        if word_delta <= 0:
            continue

        created_at = entry_field(current, "created_at")
        seconds = max(1, _round_half_up(elapsed_ms(entry_field(previous, "created_at"), created_at) / 1000))
        wps = word_delta / seconds

        pasted = min(entry_field(current, "paste_word_count") or 0, word_delta)
        if pasted > 0:
            flags.append(AuthenticityFlag(
                timestamp=created_at,
                word_delta=pasted,
                seconds=seconds,
                wps=_round_half_up(wps, 1),
                reason="paste",
            ))

        typed = word_delta - pasted
        if typed <= 0:
            continue

        if typed / seconds > WPS_THRESHOLD:
            suspicious += typed
            # One flag per interval: a paste flag already covers it.
            if pasted == 0:
                flags.append(AuthenticityFlag(
                    timestamp=created_at,
                    word_delta=typed,
                    seconds=seconds,
                    wps=_round_half_up(typed / seconds, 1),
                    reason="high_wps",
                ))
        else:
            organic += typed

    total = organic + suspicious
    if total == 0:
        return AuthenticityResult(score=None, flags=flags)

    score = _round_half_up(min(100.0, max(0.0, organic / total * 100)))
    return AuthenticityResult(score=score, flags=flags)
