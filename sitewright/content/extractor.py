"""HTML → ContentModel extraction.

Editable regions are found in a single document-order walk:

* elements marked ``data-section="<Label>"``, whose fields are the
  descendants marked ``data-field="<name>"``;
* semantic containers (section, header, nav, main, footer, article, aside)
  outside any marked region, whose fields are inferred from headings,
  paragraphs, lists, links and images.

Content inside a nested region belongs only to the nested region. Regions
without fields, and content outside every region, are dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

from sitewright.content.models import ContentModel, FieldValue, PageMetadata, Section
from sitewright.errors import ExtractionError

logger = logging.getLogger(__name__)

# Default labels for semantic containers.
SEMANTIC_TAGS: dict[str, str] = {
    "section": "Section",
    "header": "Header",
    "nav": "Navigation",
    "main": "Main Content",
    "footer": "Footer",
    "article": "Article",
    "aside": "Sidebar",
}

SKIP_TAGS = frozenset({"script", "style", "noscript", "template", "meta", "link", "head"})
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)

_WS_RE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Collapse runs of whitespace and trim."""
    return _WS_RE.sub(" ", value).strip()


@dataclass
class Region:
    """An editable region found during the walk, with its source elements.

    The element references let the generator write edited values back into
    the same page.
    """

    element: Tag
    marked: bool
    section_id: str
    label_hint: str | None
    field_elements: dict[str, Tag] = field(default_factory=dict)
    heading: Tag | None = None
    paragraphs: list[Tag] = field(default_factory=list)
    lists: list[Tag] = field(default_factory=list)
    links: list[Tag] = field(default_factory=list)
    images: list[Tag] = field(default_factory=list)
    text_parts: list[str] = field(default_factory=list)
    has_form: bool = False

    @property
    def tag(self) -> str:
        return self.element.name

    def fields(self) -> dict[str, FieldValue]:
        if self.marked:
            return {name: field_value(el) for name, el in self.field_elements.items()}

        values: dict[str, FieldValue] = {}
        if self.heading is not None:
            values["heading"] = normalize_text(self.heading.get_text())
        if self.paragraphs:
            values["paragraphs"] = [normalize_text(p.get_text()) for p in self.paragraphs]
        if self.lists:
            values["lists"] = [_list_items(lst) for lst in self.lists]
        if self.links:
            values["links"] = [_link_value(a) for a in self.links]
        if self.images:
            values["images"] = [_image_value(img) for img in self.images]
        if not values:
            text = normalize_text(" ".join(self.text_parts))
            if text:
                values["text"] = text
        return values

    def kind(self) -> str:
        explicit = self.element.get("data-section-type")
        if explicit:
            return str(explicit)
        if self.has_form:
            return "contact"
        if self.marked:
            return "content"
        if self.tag == "header":
            return "hero"
        if self.tag == "nav":
            return "navigation"
        if self.tag == "footer":
            return "footer"
        if self.lists:
            return "list"
        return "content"

    def label(self) -> str:
        if self.label_hint:
            return self.label_hint
        if self.heading is not None:
            text = normalize_text(self.heading.get_text())
            if text:
                return text
        return SEMANTIC_TAGS.get(self.tag, "Section")


def field_value(element: Tag) -> FieldValue:
    """Value of a ``data-field`` element, shaped by its tag."""
    if element.name in ("ul", "ol"):
        return _list_items(element)
    if element.name == "a":
        return _link_value(element)
    if element.name == "img":
        return _image_value(element)
    return normalize_text(element.get_text())


def _list_items(element: Tag) -> list[str]:
    return [normalize_text(li.get_text()) for li in element.find_all("li", recursive=False)]


def _link_value(element: Tag) -> dict[str, str]:
    return {"text": normalize_text(element.get_text()), "href": str(element.get("href", ""))}


def _image_value(element: Tag) -> dict[str, str]:
    return {"src": str(element.get("src", "")), "alt": str(element.get("alt", ""))}


def _label_hint(element: Tag) -> str | None:
    for attr in ("data-section", "aria-label", "data-label"):
        value = element.get(attr)
        if value and normalize_text(str(value)):
            return normalize_text(str(value))
    return None


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse markup, raising ExtractionError for anything that is not a document."""
    if not isinstance(markup, str):
        raise ExtractionError(f"Markup must be text, got {type(markup).__name__}")
    if not markup.strip():
        raise ExtractionError("Markup is empty")
    try:
        soup = BeautifulSoup(markup, "html.parser")
    except Exception as e:
        raise ExtractionError(f"Markup could not be parsed: {e}") from e
    if soup.find() is None:
        raise ExtractionError("Markup contains no elements")
    return soup


def scan_regions(soup: BeautifulSoup) -> list[Region]:
    """Walk the document once and return every region in document order.

    Iterative rather than recursive so deeply nested pages cannot hit the
    interpreter's recursion limit.
    """
    regions: list[Region] = []
    tag_counters: dict[str, int] = {}
    seen_ids: set[str] = set()

    root = soup.body or soup
    stack: list[tuple[object, Region | None]] = [
        (child, None) for child in reversed(list(root.children))
    ]

    while stack:
        node, region = stack.pop()

        if isinstance(node, NavigableString):
            if region is not None and not isinstance(node, _NON_TEXT):
                text = str(node).strip()
                if text:
                    region.text_parts.append(text)
            continue
        if not isinstance(node, Tag) or node.name in SKIP_TAGS:
            continue

        if node.has_attr("data-section") or (
            node.name in SEMANTIC_TAGS and not (region is not None and region.marked)
        ):
            region = _open_region(node, tag_counters, seen_ids)
            regions.append(region)
        elif region is not None and _collect(region, node):
            continue

        stack.extend((child, region) for child in reversed(list(node.children)))

    return regions


def _open_region(node: Tag, tag_counters: dict[str, int], seen_ids: set[str]) -> Region:
    tag_counters[node.name] = tag_counters.get(node.name, 0) + 1
    base_id = node.get("id") or node.get("data-section-id") or f"{node.name}-{tag_counters[node.name]}"
    section_id = str(base_id)
    suffix = 2
    while section_id in seen_ids:
        section_id = f"{base_id}-{suffix}"
        suffix += 1
    seen_ids.add(section_id)
    return Region(
        element=node,
        marked=node.has_attr("data-section"),
        section_id=section_id,
        label_hint=_label_hint(node),
    )


def _collect(region: Region, node: Tag) -> bool:
    """Record a node's contribution to its region.

    Returns True when the node's subtree is fully consumed and the walk
    should not descend into it.
    """
    if node.name == "form":
        region.has_form = True

    if region.marked:
        name = node.get("data-field")
        if name:
            name = str(name)
            if name in region.field_elements:
                logger.debug("duplicate data-field %r in %s, keeping first", name, region.section_id)
            else:
                region.field_elements[name] = node
            return True
        return False

    if node.name in HEADING_TAGS:
        if region.heading is None:
            region.heading = node
    elif node.name == "p":
        if normalize_text(node.get_text()):
            region.paragraphs.append(node)
    elif node.name in ("ul", "ol"):
        region.lists.append(node)
    elif node.name == "a":
        region.links.append(node)
    elif node.name == "img":
        region.images.append(node)
    return False


def extract_content(markup: str) -> ContentModel:
    """Extract a ContentModel from raw HTML.

    Pure and deterministic: the same markup always yields the same model,
    including section and field order.

    Raises:
        ExtractionError: the markup is not a parseable document.
    """
    soup = parse_markup(markup)

    title = normalize_text(soup.title.get_text()) if soup.title else ""
    description_tag = soup.find("meta", attrs={"name": "description"})
    description = ""
    if isinstance(description_tag, Tag):
        description = normalize_text(str(description_tag.get("content", "")))

    sections: list[Section] = []
    used_labels: set[str] = set()
    for region in scan_regions(soup):
        fields = region.fields()
        if not fields:
            continue
        base_label = region.label()
        label = base_label
        suffix = 2
        while label in used_labels:
            label = f"{base_label} {suffix}"
            suffix += 1
        used_labels.add(label)
        sections.append(
            Section(id=region.section_id, label=label, kind=region.kind(), fields=fields)
        )

    logger.debug("extracted %d section(s), title=%r", len(sections), title)
    return ContentModel(
        metadata=PageMetadata(title=title, description=description),
        sections=sections,
    )
