"""Markup decoder for XML and HTML documents.

XML maps onto a nested object tree. HTML is not mapped wholesale: only
tables and lists are extracted.

Known limitation: XML attributes and child elements share one object, so
an attribute and a child element with the same (lowercased) name collide
and the child element wins. No warning is raised beyond a debug log line.
"""

import re
import xml.etree.ElementTree as ET
from typing import Any

from bs4 import BeautifulSoup

from utils import get_logger

from .errors import InvalidFormatError

logger = get_logger(__name__)

TEXT_KEY = "_"

_WHITESPACE = re.compile(r"\s+")


def _local_name(name: str) -> str:
    """Drop any "{namespace}" prefix and lowercase the name."""
    if name.startswith("{"):
        name = name.split("}", 1)[1]
    return name.lower()


def _clean_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _element_text(element: ET.Element) -> str:
    """Own text of an element, including text between its children."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return _clean_text(" ".join(parts))


def _element_value(element: ET.Element) -> Any:
    children = list(element)
    text = _element_text(element)

    if not children and not element.attrib:
        return text

    node: dict[str, Any] = {}
    for name, value in element.attrib.items():
        node[_local_name(name)] = value

    grouped: dict[str, list[Any]] = {}
    for child in children:
        grouped.setdefault(_local_name(child.tag), []).append(_element_value(child))

    for name, values in grouped.items():
        if name in node:
            logger.debug(f"Element <{name}> overwrites attribute of the same name")
        node[name] = values[0] if len(values) == 1 else values

    if text:
        node[TEXT_KEY] = text
    return node


def decode_xml(text: str) -> dict[str, Any]:
    """Decode an XML document into a nested object tree.

    The root element becomes the single top-level key. Repeated sibling
    elements collapse into a list, attributes merge into their element's
    object, names are lowercased, and text is trimmed. An element holding
    only text maps to that text; one holding text alongside attributes or
    children keeps the text under "_".

    Raises:
        InvalidFormatError: If the document is not well-formed XML
    """
    try:
        root = ET.fromstring(text.strip())
    except ET.ParseError as e:
        raise InvalidFormatError(f"Invalid XML format: {e}") from e

    tree = {_local_name(root.tag): _element_value(root)}
    logger.info(f"Decoded XML document with root <{_local_name(root.tag)}>")
    return tree


def _extract_tables(soup: BeautifulSoup) -> list[list[list[str]]]:
    tables = []
    for table in soup.find_all("table"):
        rows = []
        for row in table.find_all("tr"):
            cells = [cell.get_text().strip() for cell in row.find_all(["th", "td"])]
            if cells:
                rows.append(cells)
        if rows:
            tables.append(rows)
    return tables


def _extract_lists(soup: BeautifulSoup) -> list[list[str]]:
    lists = []
    for container in soup.find_all(["ul", "ol"]):
        items = [item.get_text().strip() for item in container.find_all("li")]
        if items:
            lists.append(items)
    return lists


def text_lines(text: str) -> dict[str, list[str]]:
    """Wrap free text as ``{"content": [trimmed lines]}``."""
    return {"content": [line.strip() for line in text.strip().split("\n")]}


def decode_html(text: str) -> dict[str, Any]:
    """Extract tables and lists from an HTML document.

    Every <table> becomes a list of rows of trimmed cell text (header rows
    included as ordinary rows). Every <ul>/<ol> becomes a list of trimmed
    item texts. Keys appear only when something was found, so a document
    with neither yields {}.

    Uses the lenient html.parser backend; broken markup is parsed as far as
    possible. If the parser gives up entirely the document degrades to its
    raw text lines instead of raising.
    """
    try:
        soup = BeautifulSoup(text, "html.parser")
        tables = _extract_tables(soup)
        lists = _extract_lists(soup)
    except Exception as e:
        logger.warning(f"HTML parser failed, keeping raw text lines: {e}")
        return text_lines(text)

    data: dict[str, Any] = {}
    if tables:
        data["tables"] = tables
    if lists:
        data["lists"] = lists

    logger.info(f"Decoded HTML document: {len(tables)} tables, {len(lists)} lists")
    return data
