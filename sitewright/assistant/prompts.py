"""Prompt templates for planning content edits."""

from __future__ import annotations

import json
from typing import Any

from sitewright.content.models import ContentModel

MAX_CONTENT_CHARS = 24_000

SYSTEM_PROMPT_TEMPLATE = """\
You are Sitewright, an assistant that edits the content of a static website on behalf of its operator.

## Current Website
{site_name}

## Content Structure
```json
{content_json}
```

## Available Tools
```json
{tools_json}
```

## Output Format

Respond with a single JSON object and nothing else:

```json
{{
  "actions": [
    {{"tool": "update-field", "params": {{"section": "Hero", "field": "headline", "value": "Welcome"}}}}
  ],
  "reply": "One or two sentences telling the operator what you changed."
}}
```

## Rules
- Address sections by the label shown in Content Structure.
- Only use fields that exist in the section unless you are adding a section.
- Use update-metadata for the page title and description.
- If the request is unclear or needs no change, return an empty actions list and ask in reply.\
"""


def _render_content(content: ContentModel) -> str:
    rendered = json.dumps(content.model_dump(), indent=2, ensure_ascii=False)
    if len(rendered) > MAX_CONTENT_CHARS:
        rendered = rendered[:MAX_CONTENT_CHARS] + "\n... (truncated)"
    return rendered


def build_system_prompt(
    site_name: str,
    content: ContentModel,
    tool_definitions: list[dict[str, Any]],
) -> str:
    """Render the planning prompt for one site and its current draft."""
    tools = [d["function"] for d in tool_definitions]
    return SYSTEM_PROMPT_TEMPLATE.format(
        site_name=site_name,
        content_json=_render_content(content),
        tools_json=json.dumps(tools, indent=2),
    )
