"""Generic XML tree used by the field extractors.

Every element becomes an ``XmlNode`` carrying its text, its attributes and
its child elements grouped by tag. Namespaced tags keep their literal
``prefix:name`` key (``itunes:duration``, ``content:encoded``); no namespace
resolution is done.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from xml.parsers.expat import ExpatError

import xmltodict

from podfeed.errors import XmlSyntaxError

# Text-content and CDATA keys produced by common XML-to-dict converters
# (xmltodict, xml2js, x2js).
_TEXT_KEYS = ("#text", "_", "$t", "__cdata")
_ATTR_CONTAINER = "$"
_ATTR_PREFIX = "@"


@dataclass(frozen=True)
class XmlNode:
    text: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    children: dict[str, list["XmlNode"]] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: object) -> "XmlNode":
        """Normalize any of the observed element encodings into a node.

        Accepts a plain string, a mapping with a text-content key, a mapping
        with a CDATA key (attributes either ``@``-prefixed or under ``$``),
        an existing node, or ``None`` for an empty element.
        """
        if raw is None:
            return cls()
        if isinstance(raw, XmlNode):
            return raw
        if isinstance(raw, str):
            return cls(text=raw)
        if not isinstance(raw, Mapping):
            return cls(text=str(raw))

        text = ""
        attributes: dict[str, str] = {}
        children: dict[str, list[XmlNode]] = {}
        for key, value in raw.items():
            key = str(key)
            if key in _TEXT_KEYS:
                if not text and value is not None:
                    text = str(value)
            elif key == _ATTR_CONTAINER and isinstance(value, Mapping):
                attributes.update({k: str(v) for k, v in value.items() if v is not None})
            elif key.startswith(_ATTR_PREFIX):
                if value is not None:
                    attributes[key[len(_ATTR_PREFIX):]] = str(value)
            else:
                children[key] = [cls.from_raw(v) for v in _as_list(value)]
        return cls(text=text, attributes=attributes, children=children)

    def get(self, tag: str) -> list["XmlNode"]:
        """All child elements named *tag*, in document order."""
        return self.children.get(tag, [])

    def first(self, tag: str) -> "XmlNode | None":
        nodes = self.children.get(tag)
        return nodes[0] if nodes else None


def _as_list(value: object) -> list:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return list(value)
    return [value]


def parse_xml(xml_text: str | bytes) -> XmlNode:
    """Parse an XML document into a document node whose child is the root element.

    Raises:
        XmlSyntaxError: The document is not well-formed.
    """
    try:
        if isinstance(xml_text, str):
            raw = xmltodict.parse(xml_text.lstrip(), encoding="utf-8")
        else:
            raw = xmltodict.parse(xml_text)
    except ExpatError as e:
        raise XmlSyntaxError(str(e)) from e
    return XmlNode.from_raw(raw)
