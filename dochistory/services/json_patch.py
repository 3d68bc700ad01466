"""JSON patch primitives for document history.

A deep helper module: computes structural diffs between two JSON values,
applies them back, and decides when a history row should carry a full
snapshot instead of a patch.

Operations are plain JSON-serializable dicts so they can be stored as-is in a
JSON column::

    {"op": "replace", "path": "/content/0/content/0/text", "value": "Hello"}

Only ``add``, ``remove`` and ``replace`` are produced or accepted. Paths are
RFC 6901 JSON Pointers; ``""`` addresses the whole document.
"""

import copy
import json
from typing import Any, Dict, List, Optional

from ..exceptions import PatchApplicationError

PatchOperation = Dict[str, Any]

SNAPSHOT_EVERY_N_PATCHES = 20
"""
A new history row is stored as a snapshot when it would otherwise be the
Nth consecutive patch since the last snapshot. Bounds replay cost and the
blast radius of one corrupted patch.
"""

SNAPSHOT_PATCH_SIZE_RATIO = 0.5
"""Snapshot when the serialized patch exceeds this fraction of the serialized content."""

SNAPSHOT_TOP_LEVEL_RATIO = 0.5
"""Snapshot when the patch touches more than this fraction of the top-level nodes."""

SNAPSHOT_MIN_TOP_LEVEL_NODES = 4
"""The top-level ratio only applies to documents with at least this many nodes."""

_OPS = frozenset({"add", "remove", "replace"})


# ---------------------------------------------------------------------------
# Pointers
# ---------------------------------------------------------------------------

def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    i = token.find("~")
    while i != -1:
        if i + 1 >= len(token) or token[i + 1] not in "01":
            raise PatchApplicationError(f"Invalid escape sequence in pointer token: {token!r}")
        i = token.find("~", i + 2)
    return token.replace("~1", "/").replace("~0", "~")


def _join(path: str, token) -> str:
    return f"{path}/{_escape(str(token))}"


def _parse_pointer(path: Any) -> List[str]:
    if not isinstance(path, str):
        raise PatchApplicationError(f"Pointer must be a string, got {type(path).__name__}")
    if path == "":
        return []
    if not path.startswith("/"):
        raise PatchApplicationError(f"Pointer must start with '/': {path!r}")
    return [_unescape(token) for token in path[1:].split("/")]


def _array_index(token: str, length: int, allow_end: bool) -> int:
    if allow_end and token == "-":
        return length
    if not (token.isascii() and token.isdigit()) or (len(token) > 1 and token[0] == "0"):
        raise PatchApplicationError(f"Invalid array index: {token!r}")
    index = int(token)
    limit = length if allow_end else length - 1
    if index > limit:
        raise PatchApplicationError(f"Array index out of range: {index}")
    return index


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------

def _equal(a: Any, b: Any) -> bool:
    """Type-strict deep equality (``True`` is not ``1``)."""
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(_equal(a[k], b[k]) for k in a)
    if isinstance(a, list):
        return len(a) == len(b) and all(_equal(x, y) for x, y in zip(a, b))
    return a == b


def _diff(previous: Any, next_value: Any, path: str, ops: List[PatchOperation]) -> None:
    if _equal(previous, next_value):
        return

    if isinstance(previous, dict) and isinstance(next_value, dict):
        for key in sorted(previous.keys() - next_value.keys()):
            ops.append({"op": "remove", "path": _join(path, key)})
        for key in sorted(previous.keys() & next_value.keys()):
            _diff(previous[key], next_value[key], _join(path, key), ops)
        for key in sorted(next_value.keys() - previous.keys()):
            ops.append({"op": "add", "path": _join(path, key), "value": copy.deepcopy(next_value[key])})
        return

    if isinstance(previous, list) and isinstance(next_value, list):
        _diff_arrays(previous, next_value, path, ops)
        return

    ops.append({"op": "replace", "path": path, "value": copy.deepcopy(next_value)})


def _diff_arrays(previous: list, next_value: list, path: str, ops: List[PatchOperation]) -> None:
    shortest = min(len(previous), len(next_value))

    prefix = 0
    while prefix < shortest and _equal(previous[prefix], next_value[prefix]):
        prefix += 1

    suffix = 0
    while (
        suffix < shortest - prefix
        and _equal(previous[len(previous) - 1 - suffix], next_value[len(next_value) - 1 - suffix])
    ):
        suffix += 1

    old_middle = previous[prefix:len(previous) - suffix]
    new_middle = next_value[prefix:len(next_value) - suffix]
    paired = min(len(old_middle), len(new_middle))

    for offset in range(paired):
        _diff(old_middle[offset], new_middle[offset], _join(path, prefix + offset), ops)

    # Surplus old elements sit at the same index once each one is removed.
    for _ in range(len(old_middle) - paired):
        ops.append({"op": "remove", "path": _join(path, prefix + paired)})

    for offset in range(paired, len(new_middle)):
        ops.append({
            "op": "add",
            "path": _join(path, prefix + offset),
            "value": copy.deepcopy(new_middle[offset]),
        })


def create_json_patch(previous: Any, next_value: Any) -> List[PatchOperation]:
    """Compute the operations that turn ``previous`` into ``next_value``.

    Deterministic: object keys are visited in sorted order and arrays are
    diffed after stripping their common prefix and suffix, so inserting a
    paragraph in the middle of a document yields one ``add``.

    Returns:
        Ordered list of operations; empty when the inputs are deeply equal.
    """
    ops: List[PatchOperation] = []
    _diff(previous, next_value, "", ops)
    return ops


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------

def _resolve_parent(document: Any, tokens: List[str]) -> Any:
    node = document
    for token in tokens[:-1]:
        if isinstance(node, dict):
            if token not in node:
                raise PatchApplicationError(f"Path segment not found: {token!r}")
            node = node[token]
        elif isinstance(node, list):
            node = node[_array_index(token, len(node), allow_end=False)]
        else:
            raise PatchApplicationError(f"Cannot descend into scalar at segment {token!r}")
    return node


def _apply_operation(document: Any, operation: Any) -> Any:
    if not isinstance(operation, dict):
        raise PatchApplicationError("Patch operation must be an object")

    op = operation.get("op")
    if not isinstance(op, str) or op not in _OPS:
        raise PatchApplicationError(f"Unsupported patch operation: {op!r}", operation)
    if "path" not in operation:
        raise PatchApplicationError("Patch operation is missing 'path'", operation)
    if op != "remove" and "value" not in operation:
        raise PatchApplicationError(f"'{op}' operation is missing 'value'", operation)

    tokens = _parse_pointer(operation["path"])
    value = copy.deepcopy(operation.get("value"))

    if not tokens:
        if op == "remove":
            raise PatchApplicationError("Cannot remove the document root", operation)
        return value

    parent = _resolve_parent(document, tokens)
    last = tokens[-1]

    if isinstance(parent, dict):
        if op == "add":
            parent[last] = value
        elif last not in parent:
            raise PatchApplicationError(f"Key not found: {last!r}", operation)
        elif op == "remove":
            del parent[last]
        else:
            parent[last] = value
    elif isinstance(parent, list):
        index = _array_index(last, len(parent), allow_end=(op == "add"))
        if op == "add":
            parent.insert(index, value)
        elif op == "remove":
            del parent[index]
        else:
            parent[index] = value
    else:
        raise PatchApplicationError(f"Parent of {operation['path']!r} is not a container", operation)

    return document


def apply_json_patch(base: Any, operations: List[PatchOperation]) -> Any:
    """Apply ``operations`` in order to a deep copy of ``base``.

    ``base`` is never mutated and no partially-patched value escapes.

    Raises:
        PatchApplicationError: A path does not resolve, an index is malformed
            or out of range, or an operation is malformed.
    """
    if not isinstance(operations, list):
        raise PatchApplicationError("Patch must be a list of operations")

    document = copy.deepcopy(base)
    for operation in operations:
        try:
            document = _apply_operation(document, operation)
        except PatchApplicationError as e:
            if not e.details and isinstance(operation, dict):
                e.details = {"operation": operation}
            raise
    return document


# ---------------------------------------------------------------------------
# Snapshot policy
# ---------------------------------------------------------------------------

def _serialized_size(value: Any) -> int:
    return len(json.dumps(value, separators=(",", ":"), sort_keys=True))


def _touched_top_level_nodes(patch: List[PatchOperation]) -> set:
    touched = set()
    for operation in patch:
        tokens = operation["path"].split("/")
        # "/content/<index>/..." addresses a top-level node of a doc tree
        if len(tokens) >= 3 and tokens[1] == "content":
            touched.add(tokens[2])
        else:
            touched.add(None)
    return touched


def should_store_snapshot(
    patch: List[PatchOperation],
    next_content: Any,
    patches_since_snapshot: int = 0,
) -> bool:
    """Decide whether a new history row stores a snapshot instead of a patch.

    Args:
        patch: Operations from the previous content to ``next_content``.
        next_content: The content the new row represents.
        patches_since_snapshot: How many consecutive patch rows the new row
            would extend, counting itself.

    Returns:
        True when the chain hit the snapshot cadence, the patch is large
        relative to the content, or it rewrites most top-level nodes of a
        document with at least SNAPSHOT_MIN_TOP_LEVEL_NODES of them.
    """
    if patches_since_snapshot >= SNAPSHOT_EVERY_N_PATCHES:
        return True

    if _serialized_size(patch) > SNAPSHOT_PATCH_SIZE_RATIO * _serialized_size(next_content):
        return True

    nodes: Optional[list] = None
    if isinstance(next_content, dict) and isinstance(next_content.get("content"), list):
        nodes = next_content["content"]
    if nodes:
        touched = _touched_top_level_nodes(patch)
        if None in touched:
            return True
        if len(nodes) >= SNAPSHOT_MIN_TOP_LEVEL_NODES and len(touched) > SNAPSHOT_TOP_LEVEL_RATIO * len(nodes):
            return True

    return False
