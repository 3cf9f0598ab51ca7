"""Breadth-first traversal of the note link graph.

The walk starts at a root note and follows outgoing references layer by
layer. Two depth limits shape the result:

- content_depth: notes at depth <= content_depth carry their full text
- title_depth: notes at depth <= title_depth are included at all; beyond
  content_depth they appear as titles only

A note is admitted the first time it is discovered, which under BFS is its
shortest-hop depth. Later references to it (cycles, converging paths,
different spellings of the same link) are dropped. References that do not
resolve are collected as missing notes and the walk continues.
"""

from __future__ import annotations

import logging
from collections import deque

from .errors import InvalidDepthError
from .models import ExportNode
from .provider import NoteProvider, NoteRef

log = logging.getLogger(__name__)


class BFSTraversal:
    """Builds an export tree from a root note.

    Args:
        provider: Source of notes, references and resolution.
        content_depth: Deepest level whose notes include content (>= 1).
        title_depth: Deepest level included at all (>= content_depth).

    Raises:
        InvalidDepthError: If the depth limits are inconsistent.
    """

    def __init__(self, provider: NoteProvider, content_depth: int, title_depth: int) -> None:
        if content_depth < 1 or title_depth < content_depth:
            raise InvalidDepthError(content_depth, title_depth)

        self.provider = provider
        self.content_depth = content_depth
        self.title_depth = title_depth
        self._missing_notes: dict[str, None] = {}

    def get_missing_notes(self) -> list[str]:
        """Unresolved references from the most recent traversal, first-seen order."""
        return list(self._missing_notes)

    async def _make_node(self, note: NoteRef, depth: int) -> ExportNode:
        include_content = depth <= self.content_depth
        content = await self.provider.read_content(note) if include_content else None
        return ExportNode(
            identifier=self.provider.identifier(note),
            title=self.provider.display_title(note),
            depth=depth,
            include_content=include_content,
            content=content,
        )

    async def traverse(self, root_identifier: str) -> ExportNode | None:
        """Walk the link graph from root_identifier.

        Returns:
            Root of the export tree, or None if the root note does not exist.

        Raises:
            ProviderError: If reading any note fails; no partial tree is returned.
        """
        self._missing_notes = {}

        root_note = await self.provider.resolve_root(root_identifier)
        if root_note is None:
            return None

        root = await self._make_node(root_note, 0)
        visited: set[str] = {root.identifier}
        queue: deque[tuple[ExportNode, NoteRef]] = deque([(root, root_note)])

        while queue:
            node, note = queue.popleft()

            # Depth exhausted: keep as a leaf, no reference lookup
            if node.depth >= self.title_depth:
                continue

            references = await self.provider.outgoing_references(note)
            log.debug("Expanding %s (depth %d, %d references)", node.identifier, node.depth, len(references))

            for reference in references:
                target = await self.provider.resolve_reference(reference, node.identifier)
                if target is None:
                    if reference not in self._missing_notes:
                        log.debug("Unresolved reference [[%s]] in %s", reference, node.identifier)
                    self._missing_notes[reference] = None
                    continue

                target_id = self.provider.identifier(target)
                if target_id in visited:
                    continue

                # Mark at discovery so later references collapse into this node
                visited.add(target_id)
                child = await self._make_node(target, node.depth + 1)
                node.children.append(child)
                queue.append((child, target))

        log.debug(
            "Traversal from %s visited %d notes, %d missing",
            root.identifier,
            len(visited),
            len(self._missing_notes),
        )
        return root
