"""Inline Jinja2 templates for the export formats.

Every template receives:
    metadata: ExportMetadata
    nodes: list[ExportNode] in traversal order
    root: the root ExportNode
"""

from __future__ import annotations

from jinja2 import BaseLoader, Environment, select_autoescape

# Structured format with a metadata header. Autoescaped.
XML_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<smart_export>
  <metadata>
    <vault>{{ metadata.vault_name }}</vault>
    <export_date>{{ metadata.generated_at.isoformat(timespec="seconds") }}</export_date>
    <root_note>{{ metadata.root_title }}</root_note>
    <content_depth>{{ metadata.content_depth }}</content_depth>
    <title_depth>{{ metadata.title_depth }}</title_depth>
    <total_notes>{{ nodes | length }}</total_notes>
    <missing_notes_count>{{ metadata.missing_count }}</missing_notes_count>
  </metadata>
  <notes>
{% for node in nodes %}
    <note path="{{ node.identifier }}" title="{{ node.title }}" depth="{{ node.depth }}" include_content="{{ 'true' if node.include_content else 'false' }}">
{% if node.include_content %}
      <content>{{ node.content }}</content>
{% endif %}
{% if node.children %}
      <links>
{% for child in node.children %}
        <link path="{{ child.identifier }}">{{ child.title }}</link>
{% endfor %}
      </links>
{% endif %}
    </note>
{% endfor %}
  </notes>
{% if metadata.missing_notes %}
  <missing_notes>
{% for name in metadata.missing_notes %}
    <missing_note>{{ name }}</missing_note>
{% endfor %}
  </missing_notes>
{% endif %}
</smart_export>
"""

# Markdown laid out for language models: header, link outline, then notes.
LLM_MARKDOWN_TEMPLATE = """# Smart Export: {{ metadata.root_title }}

- Vault: {{ metadata.vault_name }}
- Exported: {{ metadata.generated_at.isoformat(timespec="seconds") }}
- Notes: {{ nodes | length }} ({{ content_count }} with content, {{ title_only_count }} titles only)
- Content depth: {{ metadata.content_depth }}
- Title depth: {{ metadata.title_depth }}
- Missing notes: {{ metadata.missing_count }}

## Link Structure

{{ outline }}

## Notes
{% for node in nodes %}

---

### {{ node.title }}

- Path: {{ node.identifier }}
- Depth: {{ node.depth }}
{% if node.children %}
- Links to: {{ node.children | map(attribute="title") | join(", ") }}
{% endif %}

{% if node.include_content %}
{{ node.content }}
{% else %}
_Title only: beyond content depth._
{% endif %}
{% endfor %}
{% if metadata.missing_notes %}

---

## Missing Notes

{% for name in metadata.missing_notes %}
- {{ name }}
{% endfor %}
{% endif %}
"""

# Clean reading copy: no metadata, frontmatter stripped by the caller.
PRINT_MARKDOWN_TEMPLATE = """# {{ root.title }}

{{ bodies[0] }}
{% for node, body in sections %}

{{ "#" * ([node.depth + 1, 6] | min) }} {{ node.title }}

{{ body }}
{% endfor %}
{% if title_only %}

## Related Notes

{% for node in title_only %}
- {{ node.title }}
{% endfor %}
{% endif %}
"""


def _get_env(*, autoescape: bool) -> Environment:
    """Create a Jinja2 environment; XML output is autoescaped, markdown is not."""
    return Environment(
        loader=BaseLoader(),
        autoescape=select_autoescape(default=autoescape, default_for_string=autoescape),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
