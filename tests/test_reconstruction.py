"""Tests for point-in-time reconstruction from snapshots and patch chains."""

import copy
from datetime import datetime, timedelta, timezone

from dochistory.services.json_patch import create_json_patch
from dochistory.services.reconstruction import ReconstructionStatus, reconstruct, reconstruct_content
from tests.conftest import essay, make_doc

T0 = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


def _entry(entry_id, minute, snapshot=None, patch=None):
    return {
        "id": entry_id,
        "snapshot": snapshot,
        "patch": patch,
        "created_at": T0 + timedelta(minutes=minute),
    }


def _chain(contents):
    """Snapshot of contents[0] followed by one patch entry per later version."""
    entries = [_entry(1, 0, snapshot=copy.deepcopy(contents[0]))]
    for i in range(1, len(contents)):
        entries.append(_entry(i + 1, i, patch=create_json_patch(contents[i - 1], contents[i])))
    return entries


VERSIONS = [
    make_doc("Intro"),
    make_doc("Intro", "Body"),
    make_doc("Intro", "Body text"),
    make_doc("Intro paragraph", "Body text"),
    make_doc("Body text", "Conclusion"),
]


class TestReconstruct:

    def test_each_version_is_rebuilt(self):
        entries = _chain(VERSIONS)
        for i, expected in enumerate(VERSIONS):
            result = reconstruct(entries, i + 1)
            assert result.ok
            assert result.content == expected

    def test_latest_snapshot_anchors_chain(self):
        entries = _chain(VERSIONS)
        # A later snapshot makes the earlier chain irrelevant.
        entries[2] = _entry(3, 2, snapshot=VERSIONS[2])
        entries[1]["patch"] = [{"op": "remove", "path": "/nope"}]
        assert reconstruct_content(entries, 5) == VERSIONS[4]

    def test_unsorted_input(self):
        entries = list(reversed(_chain(VERSIONS)))
        assert reconstruct_content(entries, 4) == VERSIONS[3]

    def test_input_not_mutated(self):
        entries = _chain(VERSIONS)
        before = copy.deepcopy(entries)
        reconstruct(entries, 5)
        assert entries == before

    def test_result_does_not_alias_snapshot(self):
        entries = _chain(VERSIONS)
        content = reconstruct_content(entries, 1)
        content["content"].append({"type": "paragraph"})
        assert entries[0]["snapshot"] == VERSIONS[0]

    def test_iso_string_timestamps(self):
        entries = _chain(VERSIONS[:3])
        for entry in entries:
            entry["created_at"] = entry["created_at"].isoformat().replace("+00:00", "Z")
        assert reconstruct_content(entries, 3) == VERSIONS[2]

    def test_equal_timestamps_ordered_by_id(self):
        entries = _chain(VERSIONS[:3])
        for entry in entries:
            entry["created_at"] = T0
        assert reconstruct_content(list(reversed(entries)), 3) == VERSIONS[2]

    def test_objects_with_attributes(self):
        class Row:
            def __init__(self, **fields):
                self.__dict__.update(fields)

        rows = [Row(**entry) for entry in _chain(VERSIONS[:2])]
        assert reconstruct_content(rows, 2) == VERSIONS[1]


class TestReconstructionFailures:

    def test_unknown_entry(self):
        result = reconstruct(_chain(VERSIONS), 99)
        assert result.status == ReconstructionStatus.NOT_FOUND
        assert result.content is None
        assert reconstruct_content(_chain(VERSIONS), 99) is None

    def test_empty_history(self):
        assert reconstruct([], 1).status == ReconstructionStatus.NOT_FOUND

    def test_no_snapshot_before_target(self):
        entries = _chain(VERSIONS)[1:]
        result = reconstruct(entries, 3)
        assert result.status == ReconstructionStatus.NO_SNAPSHOT
        assert result.content is None

    def test_broken_patch_fails_target_and_later(self):
        entries = _chain(VERSIONS)
        entries[2]["patch"] = [{"op": "remove", "path": "/content/9"}]

        assert reconstruct_content(entries, 2) == VERSIONS[1]
        for target in (3, 4, 5):
            result = reconstruct(entries, target)
            assert result.status == ReconstructionStatus.BROKEN_CHAIN
            assert result.broken_entry_id == 3
            assert result.content is None

    def test_broken_chain_recovers_at_next_snapshot(self):
        contents = [essay(), essay(p0="One."), essay(p0="Two."), essay(p0="Three.")]
        entries = _chain(contents)
        entries[1]["patch"] = "garbage"
        entries[2] = _entry(3, 2, snapshot=contents[2])
        assert reconstruct_content(entries, 2) is None
        assert reconstruct_content(entries, 4) == contents[3]

    def test_entry_without_snapshot_or_patch_breaks_chain(self):
        entries = _chain(VERSIONS[:3])
        entries[1]["patch"] = None
        result = reconstruct(entries, 3)
        assert result.status == ReconstructionStatus.BROKEN_CHAIN
        assert result.broken_entry_id == 2
