"""Vendor prefixing for compiled CSS.

Covers the properties and values that still needed prefixes across the last
ten versions of the mainstream browsers. Prefixed copies are inserted before
the standard declaration, which is kept last so it wins where supported.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Set, Tuple

WEBKIT = "-webkit-"
MOZ = "-moz-"
MS = "-ms-"
O = "-o-"

PROPERTY_PREFIXES: Dict[str, Tuple[str, ...]] = {
    "animation": (WEBKIT, O),
    "animation-delay": (WEBKIT, O),
    "animation-duration": (WEBKIT, O),
    "animation-name": (WEBKIT, O),
    "animation-timing-function": (WEBKIT, O),
    "appearance": (WEBKIT, MOZ),
    "backface-visibility": (WEBKIT,),
    "box-shadow": (WEBKIT,),
    "box-sizing": (WEBKIT,),
    "columns": (WEBKIT, MOZ),
    "flex": (WEBKIT, MS),
    "flex-direction": (WEBKIT, MS),
    "flex-wrap": (WEBKIT, MS),
    "hyphens": (WEBKIT, MS),
    "perspective": (WEBKIT,),
    "transform": (WEBKIT, MS, O),
    "transform-origin": (WEBKIT, MS, O),
    "transition": (WEBKIT, O),
    "transition-duration": (WEBKIT, O),
    "transition-property": (WEBKIT, O),
    "transition-timing-function": (WEBKIT, O),
    "user-select": (WEBKIT, MOZ, MS),
}

# (property, value) -> prefixed replacement values
VALUE_PREFIXES: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("display", "flex"): ("-webkit-box", "-ms-flexbox"),
    ("display", "inline-flex"): ("-webkit-inline-box", "-ms-inline-flexbox"),
    ("position", "sticky"): ("-webkit-sticky",),
}

_LAST_N = re.compile(r"^\s*last\s+(\d+)\s+versions?\s*$", re.IGNORECASE)

_DECLARATION = re.compile(
    r"^(?P<indent>[ \t]*)(?P<prop>[a-z][a-z-]*)\s*:\s*(?P<value>[^;{}]+?)\s*;",
    re.MULTILINE,
)

# Innermost `{...}` body: declarations only, never nested rules
_BLOCK = re.compile(r"\{[^{}]*\}")


def parse_browsers(browsers: Iterable[str]) -> int:
    """Return the largest `last N versions` window in the query, 0 if none."""
    window = 0
    for query in browsers or []:
        m = _LAST_N.match(query)
        if not m:
            raise ValueError(f"Unsupported browsers query: {query!r}")
        window = max(window, int(m.group(1)))
    return window


def _expand(prop: str, value: str) -> List[Tuple[str, str, str]]:
    """(lead, property, value) triples to emit before the declaration.

    `lead` is the vendor prefix carried by the property name, empty when only
    the value is prefixed.
    """
    out = []
    for prefix in PROPERTY_PREFIXES.get(prop, ()):
        out.append((prefix, prefix + prop, value))
    for alt in VALUE_PREFIXES.get((prop, value.strip()), ()):
        out.append(("", prop, alt))
    return out


def _declared(block: str) -> Set[Tuple[str, str]]:
    """(property, value) pairs already written in a block, prefixed ones included."""
    found = set()
    for decl in block.strip("{}").split(";"):
        name, sep, value = decl.partition(":")
        if sep:
            found.add((name.strip().lower(), value.strip()))
    return found


def _prefix_block(block: str, cascade: bool) -> str:
    declared = _declared(block)
    names = {name for name, _ in declared}

    def repl(m: re.Match) -> str:
        indent, prop, value = m.group("indent"), m.group("prop"), m.group("value")
        extra = [
            (lead, p, v)
            for lead, p, v in _expand(prop, value)
            if not (p in names if lead else (p, v) in declared)
        ]
        if not extra:
            return m.group(0)
        # cascade: right-align property names on the standard declaration
        width = max(len(lead) for lead, _, _ in extra) if cascade else 0
        lines = [
            f"{indent}{' ' * (width - len(lead))}{p}: {v};" for lead, p, v in extra
        ]
        lines.append(f"{indent}{' ' * width}{prop}: {value};")
        return "\n".join(lines)

    return _DECLARATION.sub(repl, block)


def prefix_css(css: str, browsers: Iterable[str], cascade: bool = False) -> str:
    """Insert vendor-prefixed copies before each standard declaration.

    Prefixed declarations a block already carries are not written twice.
    """
    if parse_browsers(browsers) == 0:
        return css
    return _BLOCK.sub(lambda b: _prefix_block(b.group(0), cascade), css)
