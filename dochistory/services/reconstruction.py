"""Point-in-time reconstruction of document content from history entries.

Content at an entry is rebuilt by starting from the nearest snapshot at or
before it and replaying every later patch up to and including the entry.
A broken patch anywhere in that chain invalidates the result; no partial
content is ever returned.
"""

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from ..exceptions import PatchApplicationError
from .history_utils import entry_field, sort_chronologically
from .json_patch import apply_json_patch

logger = logging.getLogger(__name__)


class ReconstructionStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    NO_SNAPSHOT = "no_snapshot"
    BROKEN_CHAIN = "broken_chain"


@dataclass
class ReconstructionResult:
    """Outcome of a reconstruction; ``content`` is set only when status is OK."""
    status: ReconstructionStatus
    content: Any = None
    broken_entry_id: Any = None

    @property
    def ok(self) -> bool:
        return self.status == ReconstructionStatus.OK


def reconstruct(entries: Iterable[Any], target_entry_id: Any) -> ReconstructionResult:
    """Rebuild the content a document had at ``target_entry_id``.

    Args:
        entries: The complete history of one document, in any order.
        target_entry_id: Id of the entry to rebuild.

    Returns:
        ReconstructionResult tagged OK, NOT_FOUND, NO_SNAPSHOT or BROKEN_CHAIN.
    """
    ordered = sort_chronologically(entries)

    target_index = next(
        (i for i, entry in enumerate(ordered) if entry_field(entry, "id") == target_entry_id),
        None,
    )
    if target_index is None:
        return ReconstructionResult(ReconstructionStatus.NOT_FOUND)

    anchor_index = next(
        (i for i in range(target_index, -1, -1) if entry_field(ordered[i], "snapshot") is not None),
        None,
    )
    if anchor_index is None:
        return ReconstructionResult(ReconstructionStatus.NO_SNAPSHOT)

    content = copy.deepcopy(entry_field(ordered[anchor_index], "snapshot"))

    for entry in ordered[anchor_index + 1:target_index + 1]:
        patch = entry_field(entry, "patch")
        try:
            if patch is None:
                raise PatchApplicationError("History entry has neither snapshot nor patch")
            content = apply_json_patch(content, patch)
        except PatchApplicationError as e:
            entry_id = entry_field(entry, "id")
            logger.warning(
                "History chain broken",
                extra={"entry_id": entry_id, "target_entry_id": target_entry_id, "reason": e.message},
            )
            return ReconstructionResult(ReconstructionStatus.BROKEN_CHAIN, broken_entry_id=entry_id)

    return ReconstructionResult(ReconstructionStatus.OK, content=content)


def reconstruct_content(entries: Iterable[Any], target_entry_id: Any) -> Optional[Any]:
    """Content at ``target_entry_id``, or None when it cannot be rebuilt.

    "Entry not found", "no snapshot to anchor on" and "broken patch chain"
    all yield None; use ``reconstruct`` to tell them apart.
    """
    result = reconstruct(entries, target_entry_id)
    return result.content if result.ok else None
