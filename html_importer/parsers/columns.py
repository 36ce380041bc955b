"""
Columns parser.

Without explicit cells, finds the first group of same-tag siblings (more than
one) below the element and returns them as a single row of columns.
"""

from bs4 import BeautifulSoup, Tag

from . import block


def _positional_path(element: Tag) -> str:
    """XPath-like position, e.g. /html[1]/body[1]/div[2]."""
    segments = []
    node = element
    while isinstance(node, Tag) and not isinstance(node, BeautifulSoup):
        index = 1 + sum(
            1 for sibling in node.previous_siblings
            if isinstance(sibling, Tag) and sibling.name == node.name
        )
        segments.insert(0, f"{node.name}[{index}]")
        node = node.parent
    return "/" + "/".join(segments)


def sibling_group(element: Tag, predicate) -> list:
    """First group of same-parent, same-tag descendants whose size satisfies `predicate`."""
    groups: dict[str, list[Tag]] = {}
    for descendant in element.find_all(True):
        path = _positional_path(descendant)
        groups.setdefault(path[:path.rfind("[")], []).append(descendant)

    for members in groups.values():
        if predicate(len(members)):
            return members

    children = [child for child in element.children if isinstance(child, Tag)]
    if predicate(len(children)):
        return children
    return []


def _strip_empty(element: Tag) -> None:
    for node in element.select("script, style"):
        node.extract()
    for div in element.find_all("div"):
        has_media = div.select_one("img, svg, iframe") is not None
        if not has_media and not div.get_text().replace("\n", "").strip():
            div.extract()


def parse(element, context):
    _strip_empty(element)

    if context.params.get("cells"):
        return block.parse(element, context)

    columns = sibling_group(element, lambda n: n > 1)
    return [columns] if columns else []
