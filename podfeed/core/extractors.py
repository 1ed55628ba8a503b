"""Total, side-effect-free accessors over the generic XML node shape.

Each function accepts a node, a list of nodes (repeated tags), a raw
converter value or ``None``, and never raises: absence is ``""``.
"""

from collections.abc import Sequence

from podfeed.core.xml_tree import XmlNode

ITUNES_CATEGORY = "itunes:category"


def _first_node(value: object) -> XmlNode | None:
    if value is None:
        return None
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if not value:
            return None
        value = value[0]
    return XmlNode.from_raw(value)


def extract_text(value: object) -> str:
    """Trimmed text of the first node, or ``""``."""
    node = _first_node(value)
    return node.text.strip() if node else ""


def extract_attribute(value: object, name: str) -> str:
    """Trimmed attribute *name* of the first node, or ``""``."""
    node = _first_node(value)
    if node is None:
        return ""
    return node.attributes.get(name, "").strip()


def extract_audio_url(enclosure: object) -> str:
    # Only the enclosure url counts; a bare <link> is not playable media.
    return extract_attribute(enclosure, "url")


def extract_image_url(value: object) -> str | None:
    """Image URL from an ``href`` attribute or a nested ``<url>`` element.

    Returns ``None`` rather than ``""`` when the node carries no image.
    """
    node = _first_node(value)
    if node is None:
        return None
    url = extract_attribute(node, "href") or extract_text(node.get("url"))
    return url or None


def _itunes_categories(nodes: list[XmlNode]) -> list[str]:
    names = []
    for node in nodes:
        names.append(extract_attribute(node, "text"))
        names.extend(_itunes_categories(node.get(ITUNES_CATEGORY)))
    return names


def extract_categories(channel: XmlNode | None) -> list[str]:
    """iTunes category names (sub-categories after their parent), then plain
    ``<category>`` texts. Feed order, empty names dropped, no deduplication.
    """
    if channel is None:
        return []
    names = _itunes_categories(channel.get(ITUNES_CATEGORY))
    names.extend(extract_text(node) for node in channel.get("category"))
    return [name for name in names if name]
