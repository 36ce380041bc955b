"""
Small DOM helpers over BeautifulSoup trees.

bs4 compares tags structurally with ==, so everything here that asks
"is this the same node" compares identity.
"""

from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString


def is_text_node(node) -> bool:
    """True for text nodes; comments, CDATA and doctypes are not text."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def node_text(node) -> str:
    """textContent of any node (empty string for None)."""
    if node is None:
        return ""
    if isinstance(node, Tag):
        return node.get_text()
    if is_text_node(node):
        return str(node)
    return ""


def attribute_text(value) -> str:
    """Attribute value as a string; bs4 returns lists for class-like attributes."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def element_children(node) -> list[Tag]:
    if not isinstance(node, Tag):
        return []
    return [child for child in node.children if isinstance(child, Tag)]


def contains(node, other) -> bool:
    """Node.contains(): inclusive descendant test by identity."""
    if node is other:
        return True
    return any(parent is node for parent in other.parents)


def common_ancestor(nodes: list) -> Optional[Tag]:
    """Deepest node containing every node in `nodes` (a single node is its own ancestor)."""
    if not nodes:
        return None
    if len(nodes) == 1:
        return nodes[0]
    first, last = nodes[0], nodes[-1]
    last_chain = {id(last)} | {id(parent) for parent in last.parents}
    for candidate in [first, *first.parents]:
        if id(candidate) in last_chain:
            return candidate
    return None


def owner_document(node) -> BeautifulSoup:
    """The BeautifulSoup object a node belongs to, or a fresh one when detached."""
    root = node
    while root.parent is not None:
        root = root.parent
    if isinstance(root, BeautifulSoup):
        return root
    return BeautifulSoup("", "html.parser")
