"""Content processing utilities - deep helper module for Tiptap JSON.

The history engine treats document content as an opaque JSON tree. Word and
character counts are the only thing it needs to know about the content, and
they come from a metrics function; ``build_metrics`` is the default one.
"""

from typing import Any, Callable, Optional, TypedDict


class HistoryMetrics(TypedDict, total=False):
    """Metrics recorded on every history entry."""
    word_count: int
    char_count: int
    paste_word_count: Optional[int]
    keystroke_count: Optional[int]


MetricsFn = Callable[[Any], HistoryMetrics]

_LINE_NODES = frozenset({"paragraph", "heading", "codeBlock"})
_LIST_NODES = frozenset({"bulletList", "orderedList"})

EMPTY_DOCUMENT = {"type": "doc", "content": []}


def is_valid_tiptap_content(content: Any) -> bool:
    """Check the minimal shape of a Tiptap document: ``{"type": "doc", "content": [...]}``."""
    if not isinstance(content, dict):
        return False
    if content.get("type") != "doc":
        return False
    if "content" in content and not isinstance(content["content"], list):
        return False
    return True


def _node_text(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    if node.get("type") == "text":
        return node.get("text") or ""
    children = node.get("content") or []
    return "".join(_node_text(child) for child in children)


def extract_plain_text(content: Any) -> str:
    """
    Extract plain text from Tiptap JSON content.

    Paragraphs, headings and code blocks become one line each; every list
    item of a bullet or ordered list becomes its own line. Other top-level
    nodes (images, rules) contribute nothing.

    Args:
        content: Tiptap document

    Returns:
        Lines joined with ``\\n``
    """
    if not isinstance(content, dict):
        return ""

    lines = []
    for node in content.get("content") or []:
        if not isinstance(node, dict):
            continue
        node_type = node.get("type")
        if node_type in _LINE_NODES:
            lines.append(_node_text(node))
        elif node_type in _LIST_NODES:
            for item in node.get("content") or []:
                lines.append(_node_text(item))

    return "\n".join(lines)


def is_empty(content: Any) -> bool:
    return not extract_plain_text(content).strip()


def count_characters(content: Any) -> int:
    """Count characters in the plain text (formatting excluded)."""
    return len(extract_plain_text(content))


def count_words(content: Any) -> int:
    """Count whitespace-separated words in the plain text."""
    return len(extract_plain_text(content).split())


def build_metrics(content: Any) -> HistoryMetrics:
    """Default metrics function for Tiptap documents."""
    return {
        "word_count": count_words(content),
        "char_count": count_characters(content),
    }


def with_telemetry(
    build: MetricsFn,
    paste_word_count: Optional[int] = None,
    keystroke_count: Optional[int] = None,
) -> MetricsFn:
    """Wrap a metrics function so it also reports one save's editor telemetry."""

    def _build(content: Any) -> HistoryMetrics:
        metrics = dict(build(content))
        if paste_word_count is not None:
            metrics["paste_word_count"] = paste_word_count
        if keystroke_count is not None:
            metrics["keystroke_count"] = keystroke_count
        return metrics

    return _build
