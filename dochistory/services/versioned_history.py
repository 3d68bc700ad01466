"""Versioned history persistence.

Every save of a document goes through ``persist_history``. The first entry of
a document is always a full snapshot (the baseline). Later entries store a
JSON patch against the previous entry, or a fresh snapshot when the snapshot
policy asks for one. Saves arriving within the rate-limit window of the latest
entry are merged into it in place instead of adding a row, unless either
side is a restore.

Store errors propagate unchanged: retrying a coalesce-or-insert decision
could double-write.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..exceptions import ValidationError
from ..repositories.history_repository import HistoryStore
from .content_utils import HistoryMetrics, MetricsFn
from .history_utils import elapsed_ms
from .json_patch import create_json_patch, should_store_snapshot

logger = logging.getLogger(__name__)

BASELINE_TRIGGER = "baseline"
RESTORE_TRIGGER = "restore"

UNMERGEABLE_TRIGGERS = frozenset({RESTORE_TRIGGER})
"""Entries with these triggers never coalesce with a neighbouring save."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _metric_fields(metrics: HistoryMetrics) -> dict:
    return {
        "word_count": metrics.get("word_count") or 0,
        "char_count": metrics.get("char_count") or 0,
        "paste_word_count": metrics.get("paste_word_count") or 0,
        "keystroke_count": metrics.get("keystroke_count") or 0,
    }


def insert_baseline_history(
    store: HistoryStore,
    owner_id: str,
    content: Any,
    trigger: str,
    build_metrics: MetricsFn,
    now: Optional[datetime] = None,
):
    """Insert the first history entry of a document: always a full snapshot."""
    entry = store.insert(
        owner_id,
        snapshot=content,
        patch=None,
        patch_depth=0,
        trigger=trigger,
        created_at=now or _utcnow(),
        **_metric_fields(build_metrics(content)),
    )
    logger.debug(
        "History baseline written",
        extra={"owner_id": owner_id, "entry_id": entry.id, "kind": "baseline"},
    )
    return entry


def persist_history(
    store: HistoryStore,
    owner_id: str,
    previous_content: Any,
    next_content: Any,
    trigger: str,
    rate_limit_window_ms: float,
    build_metrics: MetricsFn,
    now: Optional[datetime] = None,
):
    """Record one save of a document.

    Args:
        store: History storage for the document.
        owner_id: Document the history belongs to.
        previous_content: Content before this save.
        next_content: Content after this save.
        trigger: Why the save happened (autosave, blur, submit, restore, ...).
        rate_limit_window_ms: Saves closer than this to the latest entry are
            coalesced into it. A restore is never merged with a neighbour.
        build_metrics: Computes word/char counts (and optional telemetry) for
            ``next_content``.
        now: Current time; defaults to ``datetime.now(timezone.utc)``.

    Returns:
        The inserted or updated entry, or None when the content is unchanged
        (no write happens).
    """
    if rate_limit_window_ms < 0:
        raise ValidationError("rate_limit_window_ms must be >= 0", field="rate_limit_window_ms")

    patch = create_json_patch(previous_content, next_content)
    if not patch:
        return None

    now = now or _utcnow()
    last = store.get_latest(owner_id)

    if last is None:
        return insert_baseline_history(
            store, owner_id, next_content, BASELINE_TRIGGER, build_metrics, now=now
        )

    metrics = _metric_fields(build_metrics(next_content))

    mergeable = trigger not in UNMERGEABLE_TRIGGERS and last.trigger not in UNMERGEABLE_TRIGGERS
    if mergeable and elapsed_ms(last.created_at, now) < rate_limit_window_ms:
        # The merged row is a snapshot, so entries after it never depend on
        # the patch it used to hold.
        metrics["paste_word_count"] += last.paste_word_count or 0
        metrics["keystroke_count"] += last.keystroke_count or 0
        entry = store.update(
            last.id,
            snapshot=next_content,
            patch=None,
            patch_depth=0,
            trigger=trigger,
            created_at=now,
            **metrics,
        )
        logger.debug(
            "History entry coalesced",
            extra={"owner_id": owner_id, "entry_id": entry.id, "kind": "coalesced"},
        )
        return entry

    depth = (last.patch_depth or 0) + 1
    if should_store_snapshot(patch, next_content, depth):
        fields = {"snapshot": next_content, "patch": None, "patch_depth": 0}
        kind = "snapshot"
    else:
        fields = {"snapshot": None, "patch": patch, "patch_depth": depth}
        kind = "patch"

    entry = store.insert(owner_id, trigger=trigger, created_at=now, **fields, **metrics)
    logger.debug(
        "History entry written",
        extra={"owner_id": owner_id, "entry_id": entry.id, "kind": kind, "ops": len(patch)},
    )
    return entry
