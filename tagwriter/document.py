"""Render declarative document trees through a TagWriter."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .content import attributed
from .io_utils import read_structured
from .models import TagNode, WriterConfig
from .simple import TagWriter


def load_document(path: Path) -> TagNode:
    data = read_structured(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a single root element mapping")
    return TagNode.model_validate(data)


def render_node(writer: TagWriter, node: TagNode) -> None:
    if node.children:
        def children() -> None:
            for child in node.children:
                render_node(writer, child)

        content = children
    else:
        content = node.text

    if node.attr:
        writer.do_tag(node.tag, attributed(node.attr, content))
    else:
        writer.do_tag(node.tag, content)


def render_document(node: TagNode, config: Optional[WriterConfig] = None) -> Optional[str]:
    """Write ``node`` as a complete document.

    Returns the document text when the config has no output destination.
    """
    config = config or WriterConfig()
    with TagWriter(config) as writer:
        render_node(writer, node)
    if config.output is None:
        return writer.to_string()
    return None
