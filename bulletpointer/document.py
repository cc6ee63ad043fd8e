from __future__ import annotations

import io
import logging
import re
import xml.etree.ElementTree as ET
from collections import defaultdict
from pathlib import Path

from .errors import DocumentError, ElementLookupError, OutputWriteError

log = logging.getLogger(__name__)

# ElementTree reserves these for prefixes it generates itself
_RESERVED_PREFIX = re.compile(r"ns\d+$")

# Everything before the root element: XML declaration, comments, PIs, DOCTYPE.
# ElementTree drops all of it on write, so it is copied through verbatim.
_PROLOG = re.compile(
    rb"(?:\s+|<\?.*?\?>|<!--.*?-->|<!DOCTYPE(?:[^\[>]|\[.*?\])*>)*",
    re.DOTALL,
)
_DECL_ENCODING = re.compile(rb"""(<\?xml[^>]*?encoding\s*=\s*)(["'])[^"']*\2""")
_BOM = b"\xef\xbb\xbf"


def _register_namespaces(data: bytes) -> None:
    """Keep the source file's prefixes (inkscape, sodipodi...) on write.

    The default namespace is registered last. Inkscape also binds ``svg:`` to
    the SVG namespace, and whichever registration comes last owns the URI.
    """
    default_uri = None
    for _event, (prefix, uri) in ET.iterparse(io.BytesIO(data), events=("start-ns",)):
        if not prefix:
            default_uri = uri
            continue
        if _RESERVED_PREFIX.match(prefix):
            continue
        ET.register_namespace(prefix, uri)
    if default_uri is not None:
        ET.register_namespace("", default_uri)


def _prolog(data: bytes) -> bytes:
    if data.startswith(_BOM):
        data = data[len(_BOM):]
    prolog = _PROLOG.match(data).group(0)
    # the body is always written as UTF-8
    return _DECL_ENCODING.sub(rb"\1\2UTF-8\2", prolog, count=1)


class SvgDocument:
    """An SVG tree loaded once and mutated in place across layers.

    Element ids are indexed at load time; toggling visibility only touches
    ``style`` so the index stays valid for the life of the document.
    """

    def __init__(self, tree: ET.ElementTree, prolog: bytes = b""):
        self.tree = tree
        self.prolog = prolog
        self._by_id: dict[str, list[ET.Element]] = defaultdict(list)
        for el in tree.getroot().iter():
            el_id = el.get("id")
            if el_id is not None:
                self._by_id[el_id].append(el)

    @classmethod
    def load(cls, path: Path) -> SvgDocument:
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
        try:
            data = Path(path).read_bytes()
            _register_namespaces(data)
            parser.feed(data)
            tree = ET.ElementTree(parser.close())
        except (ET.ParseError, OSError) as e:
            raise DocumentError(f"Error reading SVG XML file {path}: {e}") from e
        doc = cls(tree, prolog=_prolog(data))
        log.debug("Loaded %s (%d ids)", path, len(doc._by_id))
        return doc

    @property
    def root(self) -> ET.Element:
        return self.tree.getroot()

    def find_unique(self, element_id: str) -> ET.Element:
        matches = self._by_id.get(element_id, [])
        if len(matches) != 1:
            raise ElementLookupError(element_id, len(matches))
        return matches[0]

    def write(self, path: Path) -> None:
        try:
            with open(path, "wb") as f:
                f.write(self.prolog)
                self.tree.write(f, encoding="utf-8", xml_declaration=False)
        except OSError as e:
            raise OutputWriteError(f"Problem writing to {path}: {e}") from e


def find_unique_element_by_id(document: SvgDocument, element_id: str) -> ET.Element:
    return document.find_unique(element_id)


def set_hidden(element: ET.Element, hidden: bool) -> None:
    """Set ``display:none`` (hidden) or ``display:inline`` in the style attribute.

    Every existing ``display`` declaration is rewritten, not only the first.
    Without one, the declaration is appended.
    """
    style = element.get("style", "")
    components = style.split(";") if style else []
    expected = "display:none" if hidden else "display:inline"

    done = False
    for i, component in enumerate(components):
        key, sep, _value = component.partition(":")
        if sep and key.strip() == "display":
            components[i] = expected
            done = True

    if not done:
        components.append(expected)

    element.set("style", ";".join(components))
