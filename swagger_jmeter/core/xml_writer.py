"""XML rendering for JMX test plans.

Test plans are built as ElementTree elements and rendered here, in one
place, so every attribute value and text node gets the same escaping.
"""

import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Added to the &, < and > escapes saxutils.escape always applies
_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}

# Parsers normalize raw whitespace in attribute values to spaces
_ATTRIBUTE_ENTITIES = {**_QUOTE_ENTITIES, "\n": "&#10;", "\r": "&#13;", "\t": "&#09;"}

INDENT = "  "


def escape_xml(value: object) -> str:
    """Escape all five XML-significant characters.

    Example:
        >>> escape_xml('{"a": "<b> & \\'c\\'"}')
        '{&quot;a&quot;: &quot;&lt;b&gt; &amp; &apos;c&apos;&quot;}'
    """
    return escape(str(value), _QUOTE_ENTITIES)


def escape_attribute(value: object) -> str:
    """Escape an attribute value, keeping newlines, carriage returns and tabs.

    Example:
        >>> escape_attribute("List\\nitems")
        'List&#10;items'
    """
    return escape(str(value), _ATTRIBUTE_ENTITIES)


def render_xml(root: ET.Element) -> str:
    """Render an element tree as an indented XML document.

    Elements with children are rendered one per line with two-space
    indentation. Elements with text render inline; an empty-string text
    gives an explicit close tag, while no text and no children gives a
    self-closing tag.

    Args:
        root: Root element

    Returns:
        XML document text ending with a newline
    """
    lines = [XML_DECLARATION]
    _render_element(root, 0, lines)
    return "\n".join(lines) + "\n"


def _render_element(elem: ET.Element, depth: int, lines: list[str]) -> None:
    indent = INDENT * depth
    attributes = "".join(f' {name}="{escape_attribute(value)}"' for name, value in elem.attrib.items())
    open_tag = f"{elem.tag}{attributes}"

    if len(elem):
        lines.append(f"{indent}<{open_tag}>")
        for child in elem:
            _render_element(child, depth + 1, lines)
        lines.append(f"{indent}</{elem.tag}>")
    elif elem.text is None:
        lines.append(f"{indent}<{open_tag}/>")
    else:
        lines.append(f"{indent}<{open_tag}>{escape_xml(elem.text)}</{elem.tag}>")
