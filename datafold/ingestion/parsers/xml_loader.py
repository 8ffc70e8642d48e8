"""XML parser for ingestion."""
from __future__ import annotations

from typing import Any, Dict, List, Sequence
from xml.etree import ElementTree as ET

from datafold.core import FileType, register_parser

from .base import ParsedDataset, ParseError, ParseOptions, Row


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return element.text or ""
    nested: Dict[str, Any] = {}
    for child in children:
        name = _local_name(child.tag)
        value = _value(child)
        if name in nested:
            existing = nested[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                nested[name] = [existing, value]
        else:
            nested[name] = value
    return nested


def _row(element: ET.Element) -> Row:
    """Attributes first, then child elements; a bare leaf keeps its text under its tag."""

    record: Row = {_local_name(key): value for key, value in element.attrib.items()}
    if len(element):
        record.update(_value(element))
    elif not record or (element.text or "").strip():
        record[_local_name(element.tag)] = element.text or ""
    return record


def _is_object(root: ET.Element, children: Sequence[ET.Element]) -> bool:
    # Repeated sibling tags (or a single child) describe a collection of rows.
    if not children:
        return bool(root.attrib) or bool((root.text or "").strip())
    tags = [_local_name(child.tag) for child in children]
    return len(children) > 1 and len(set(tags)) == len(tags)


@register_parser(FileType.XML, ".xml", description="Repeating children of the root element.")
def parse_xml(data: bytes, options: ParseOptions) -> ParsedDataset:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ParseError(f"Malformed XML: {exc}") from exc
    children = list(root)
    records: List[Row] = []
    if _is_object(root, children):
        records.append(_row(root))
        layout = "object"
    else:
        for index, child in enumerate(children):
            if options.reached(len(records)):
                break
            options.tick(index)
            records.append(_row(child))
        layout = "rows"
    metadata = {"root": _local_name(root.tag), "layout": layout}
    return ParsedDataset(records=records, metadata=metadata)
