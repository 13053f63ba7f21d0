"""Lossless SVG cleanup.

Drops comments, `<metadata>` blocks and editor-specific namespaces (Inkscape,
Sodipodi, Sketch, Illustrator). Element IDs are kept unless `cleanup_ids` is
set, in which case IDs that nothing references are removed. The root
`viewBox` is removed only when it is redundant with `width`/`height`.
"""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from typing import Dict

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

EDITOR_NAMESPACES = {
    "http://www.inkscape.org/namespaces/inkscape",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "http://www.bohemiancoding.com/sketch/ns",
    "http://ns.adobe.com/AdobeIllustrator/10.0/",
}

_LENGTH = re.compile(r"^\s*([0-9.]+)\s*(px)?\s*$")
_ID_REF = re.compile(r"url\(#([^)]+)\)|^#(.+)$")
# ElementTree reserves these and generates its own on output
_RESERVED_PREFIX = re.compile(r"^ns\d+$")


def _ns(tag: str) -> str:
    return tag[1:].split("}", 1)[0] if tag.startswith("{") else ""


def _read_namespaces(data: bytes) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for _, (prefix, uri) in ET.iterparse(io.BytesIO(data), events=("start-ns",)):
        found.setdefault(prefix, uri)
    return found


def _viewbox_redundant(root: ET.Element) -> bool:
    vb = root.get("viewBox")
    width, height = root.get("width"), root.get("height")
    if not (vb and width and height):
        return False
    w, h = _LENGTH.match(width), _LENGTH.match(height)
    if not (w and h):
        return False
    parts = vb.replace(",", " ").split()
    if len(parts) != 4:
        return False
    try:
        x, y, vw, vh = (float(v) for v in parts)
    except ValueError:
        return False
    return x == 0 and y == 0 and vw == float(w.group(1)) and vh == float(h.group(1))


def _strip(elem: ET.Element) -> None:
    for child in list(elem):
        if not isinstance(child.tag, str):
            elem.remove(child)
            continue
        if child.tag == f"{{{SVG_NS}}}metadata" or _ns(child.tag) in EDITOR_NAMESPACES:
            elem.remove(child)
            continue
        _strip(child)
    for attr in list(elem.attrib):
        if _ns(attr) in EDITOR_NAMESPACES:
            del elem.attrib[attr]


def _referenced_ids(root: ET.Element) -> set:
    refs = set()
    for el in root.iter():
        for value in el.attrib.values():
            for m in _ID_REF.finditer(value):
                refs.add(m.group(1) or m.group(2))
        if el.text and "url(#" in el.text:
            refs.update(m.group(1) for m in _ID_REF.finditer(el.text) if m.group(1))
    return refs


def optimize_svg(data: bytes, remove_viewbox: bool = True, cleanup_ids: bool = False) -> bytes:
    namespaces = _read_namespaces(data)
    for prefix, uri in namespaces.items():
        if uri not in EDITOR_NAMESPACES and not _RESERVED_PREFIX.match(prefix):
            ET.register_namespace(prefix, uri)
    ET.register_namespace("", SVG_NS)
    ET.register_namespace("xlink", XLINK_NS)

    root = ET.fromstring(data)
    _strip(root)
    if remove_viewbox and _viewbox_redundant(root):
        del root.attrib["viewBox"]
    if cleanup_ids:
        keep = _referenced_ids(root)
        for el in root.iter():
            if "id" in el.attrib and el.attrib["id"] not in keep:
                del el.attrib["id"]
    return ET.tostring(root, encoding="utf-8", xml_declaration=False)
