"""Write a ContentModel back into the page it was extracted from."""

from __future__ import annotations

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from sitewright.content.differ import normalize_value
from sitewright.content.extractor import Region, field_value, normalize_text, parse_markup, scan_regions
from sitewright.content.models import ContentModel, Section

logger = logging.getLogger(__name__)


def render_content(base_html: str, content: ContentModel, baseline: ContentModel | None = None) -> str:
    """Return *base_html* with *content* applied.

    Regions are matched to sections by id, using the same walk the
    extractor uses. Only values that differ from what the page already
    shows are written, so untouched elements keep their inline markup.
    Sections with no matching region are appended as new marked sections.
    When *baseline* is given, regions whose section was in the baseline but
    is gone from *content* are removed from the page.
    """
    soup = parse_markup(base_html)
    _apply_metadata(soup, content)

    regions = {region.section_id: region for region in scan_regions(soup)}
    draft_ids = {s.id for s in content.sections}

    for section in content.sections:
        region = regions.get(section.id)
        if region is None:
            _append_section(soup, section)
        elif region.marked:
            _apply_marked(soup, region, section)
        else:
            _apply_semantic(soup, region, section)

    if baseline is not None:
        for old in baseline.sections:
            if old.id not in draft_ids and old.id in regions:
                logger.debug("removing region %s from page", old.id)
                regions[old.id].element.decompose()

    return str(soup)


def _apply_metadata(soup: BeautifulSoup, content: ContentModel) -> None:
    title = content.metadata.title
    if title:
        if soup.title is not None:
            if normalize_text(soup.title.get_text()) != normalize_text(title):
                soup.title.string = title
        elif soup.head is not None:
            tag = soup.new_tag("title")
            tag.string = title
            soup.head.append(tag)

    description = content.metadata.description
    if description:
        meta = soup.find("meta", attrs={"name": "description"})
        if not isinstance(meta, Tag):
            if soup.head is None:
                return
            meta = soup.new_tag("meta", attrs={"name": "description"})
            soup.head.append(meta)
        if normalize_text(str(meta.get("content", ""))) != normalize_text(description):
            meta["content"] = description


def _set_value(soup: BeautifulSoup, element: Tag, value: Any) -> None:
    """Write a field value into the element that held it.

    Nothing is touched when the element already shows *value*; otherwise
    only the differing parts are replaced.
    """
    if normalize_value(field_value(element)) == normalize_value(value):
        return
    if element.name in ("ul", "ol") and isinstance(value, list):
        _set_items(soup, element, value)
    elif element.name == "a" and isinstance(value, dict):
        text = value.get("text")
        if text and normalize_text(element.get_text()) != normalize_text(str(text)):
            element.string = str(text)
        if value.get("href"):
            element["href"] = str(value["href"])
    elif element.name == "img" and isinstance(value, dict):
        if "src" in value:
            element["src"] = str(value["src"])
        if "alt" in value:
            element["alt"] = str(value["alt"])
    elif isinstance(value, str):
        element.string = value
    else:
        logger.warning("cannot write %s value into <%s>", type(value).__name__, element.name)


def _set_items(soup: BeautifulSoup, element: Tag, items: list[Any]) -> None:
    existing = element.find_all("li", recursive=False)
    for li, item in zip(existing, items):
        if normalize_text(li.get_text()) != normalize_value(item):
            li.string = str(item)
    for li in existing[len(items):]:
        li.decompose()
    for item in items[len(existing):]:
        li = soup.new_tag("li")
        li.string = str(item)
        element.append(li)


def _set_text(element: Tag, value: str) -> None:
    if normalize_text(element.get_text()) != normalize_text(value):
        element.string = value


def _apply_marked(soup: BeautifulSoup, region: Region, section: Section) -> None:
    for name, value in section.fields.items():
        element = region.field_elements.get(name)
        if element is None:
            element = soup.new_tag(_container_for(value), attrs={"data-field": name})
            region.element.append(element)
            logger.debug("added data-field %r to %s", name, section.id)
        _set_value(soup, element, value)

    for name, element in region.field_elements.items():
        if name not in section.fields:
            element.decompose()


def _apply_semantic(soup: BeautifulSoup, region: Region, section: Section) -> None:
    fields = section.fields

    heading = fields.get("heading")
    if isinstance(heading, str) and region.heading is not None:
        _set_text(region.heading, heading)

    paragraphs = fields.get("paragraphs")
    if isinstance(paragraphs, list):
        for index, value in enumerate(paragraphs):
            if not isinstance(value, str):
                continue
            if index < len(region.paragraphs):
                _set_text(region.paragraphs[index], value)
            else:
                p = soup.new_tag("p")
                p.string = value
                region.element.append(p)

    for key, elements in (("lists", region.lists), ("links", region.links), ("images", region.images)):
        values = fields.get(key)
        if not isinstance(values, list):
            continue
        for element, value in zip(elements, values):
            _set_value(soup, element, value)

    text = fields.get("text")
    if isinstance(text, str) and normalize_text(" ".join(region.text_parts)) != normalize_text(text):
        if region.element.find(True) is None:
            region.element.string = text
        else:
            logger.warning("section %s has nested markup; text field not written back", section.id)


def _append_section(soup: BeautifulSoup, section: Section) -> None:
    parent = soup.find("main") or soup.body or soup
    element = soup.new_tag(
        "section",
        attrs={"id": section.id, "data-section": section.label, "data-section-type": section.kind},
    )
    for name, value in section.fields.items():
        child = soup.new_tag(_container_for(value), attrs={"data-field": name})
        _set_value(soup, child, value)
        element.append(child)
    parent.append(element)
    logger.debug("appended new section %s to page", section.id)


def _container_for(value: Any) -> str:
    if isinstance(value, list):
        return "ul"
    if isinstance(value, dict) and "src" in value:
        return "img"
    if isinstance(value, dict) and "href" in value:
        return "a"
    return "div"
