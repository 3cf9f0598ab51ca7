"""Renderers that serialize an export tree.

Each renderer is a pure function of (tree, metadata). None of them performs
traversal; they all list notes in the order the traversal discovered them.
"""

from __future__ import annotations

from collections.abc import Callable

from ..errors import InvalidFormatError
from ..models import ExportMetadata, ExportNode, iter_nodes
from ..parser import split_frontmatter
from .templates import (
    LLM_MARKDOWN_TEMPLATE,
    PRINT_MARKDOWN_TEMPLATE,
    XML_TEMPLATE,
    _get_env,
)

Renderer = Callable[[ExportNode, ExportMetadata], str]


def _outline(node: ExportNode) -> str:
    """Indented bullet tree of titles mirroring parent/child structure."""
    lines: list[str] = []
    stack: list[ExportNode] = [node]
    while stack:
        current = stack.pop()
        marker = "" if current.include_content else " (title only)"
        lines.append(f"{'  ' * current.depth}- {current.title}{marker}")
        stack.extend(reversed(current.children))
    return "\n".join(lines)


def render_xml(root: ExportNode, metadata: ExportMetadata) -> str:
    tmpl = _get_env(autoescape=True).from_string(XML_TEMPLATE)
    return tmpl.render(metadata=metadata, nodes=list(iter_nodes(root)), root=root)


def render_llm_markdown(root: ExportNode, metadata: ExportMetadata) -> str:
    nodes = list(iter_nodes(root))
    content_count = sum(1 for node in nodes if node.include_content)
    tmpl = _get_env(autoescape=False).from_string(LLM_MARKDOWN_TEMPLATE)
    return tmpl.render(
        metadata=metadata,
        nodes=nodes,
        root=root,
        content_count=content_count,
        title_only_count=len(nodes) - content_count,
        outline=_outline(root),
    )


def render_print_markdown(root: ExportNode, metadata: ExportMetadata) -> str:
    """Reading copy: every note with content as a section, the rest as a list.

    Metadata is not printed; the parameter keeps the renderer signature uniform.
    """
    nodes = list(iter_nodes(root))
    with_content = [node for node in nodes if node.include_content]
    bodies = [split_frontmatter(node.content or "")[1].strip() for node in with_content]

    tmpl = _get_env(autoescape=False).from_string(PRINT_MARKDOWN_TEMPLATE)
    return tmpl.render(
        root=root,
        bodies=bodies,
        sections=list(zip(with_content[1:], bodies[1:])),
        title_only=[node for node in nodes if not node.include_content],
    )


RENDERERS: dict[str, Renderer] = {
    "xml": render_xml,
    "llm-markdown": render_llm_markdown,
    "print-friendly-markdown": render_print_markdown,
}


def get_renderer(export_format: str) -> Renderer:
    """Look up the renderer for a format name.

    Raises:
        InvalidFormatError: If the format is unknown.
    """
    try:
        return RENDERERS[export_format]
    except KeyError:
        raise InvalidFormatError(export_format, list(RENDERERS)) from None


__all__ = [
    "RENDERERS",
    "Renderer",
    "get_renderer",
    "render_llm_markdown",
    "render_print_markdown",
    "render_xml",
]
