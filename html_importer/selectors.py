"""
Selector micro-language.

Grammar accepted at the cell and cleanup boundaries:

    <css>                         plain CSS selector
    <css>::text                   text of each match
    <css>::text:nth-child(N)      N-th direct text node of each match (1-based)
    <css> + *::text               text of the node following each match
    <css>[attr]                   value of attribute `attr`
    <css>::text(<literal>)        removal only: text nodes equal to <literal>
    markup with {{expression}}    template cell

Selector validity is decided by the engine that runs the queries (soupsieve):
a string is a selector if soupsieve compiles it.
"""

import re
from typing import Optional, Union

import soupsieve as sv

from .logger import get_module_logger
from .schemas import Placeholder, SelectorCell, SelectorDescriptor, TemplateCell

logger = get_module_logger("selectors")

PSEUDO_TEXT_SELECTOR = "::text"

TEXT_MARKER_PATTERN = re.compile(r"::text(?::nth-child\((?P<nth_child>\d+)\))?$")
SIBLING_WILDCARD_PATTERN = re.compile(r"\+\s*\*\s*$")
ATTRIBUTE_PATTERN = re.compile(r"\[([^=\[\]]*?)\]$")
SEARCH_TEXT_PATTERN = re.compile(r"::text\((.*?)\)")
SEARCH_MARKER_PATTERN = re.compile(r"::text\((.*)\)")
TEMPLATE_PATTERN = re.compile(r"\{\{(.+?)\}\}")


def parse_selector(raw: Optional[str]) -> SelectorDescriptor:
    """Split a raw selector string into its CSS selector and extraction flags."""
    raw = raw or ""

    match = TEXT_MARKER_PATTERN.search(raw)
    use_text = match is not None
    selector = raw[:match.start()] if match else raw

    child_index = None
    if match and match.group("nth_child"):
        child_index = int(match.group("nth_child")) or None

    # "h1 + *::text" leaves "h1 + *" once the text marker is gone
    use_sibling_text = use_text and bool(SIBLING_WILDCARD_PATTERN.search(selector))
    if use_sibling_text:
        selector = SIBLING_WILDCARD_PATTERN.sub("", selector)
    selector = selector.strip()

    attribute_match = ATTRIBUTE_PATTERN.search(selector)
    attribute = attribute_match.group(1).strip() if attribute_match else None

    return SelectorDescriptor(
        selector=selector,
        use_text=use_text,
        use_sibling_text=use_sibling_text,
        child_index=child_index,
        attribute=attribute or None,
    )


def is_valid_selector(selector) -> bool:
    """Can the query engine compile `selector`?  Never raises."""
    if not isinstance(selector, str) or not selector.strip():
        return False
    try:
        sv.compile(selector)
    except Exception as e:
        logger.debug(f"Not a CSS selector '{selector}': {e}")
        return False
    return True


def is_attribute_selector(selector: str) -> bool:
    return bool(ATTRIBUTE_PATTERN.search(selector or ""))


def is_text_selector(selector) -> bool:
    return isinstance(selector, str) and PSEUDO_TEXT_SELECTOR in selector


def get_search_selector(selector: str = "") -> tuple[str, Optional[str]]:
    """
    Split a removal selector "p::text(Draft)" into ("p", "Draft").

    The search literal is None when the selector carries no parenthesized text.
    """
    search = SEARCH_TEXT_PATTERN.search(selector)
    clean = SEARCH_MARKER_PATTERN.sub("", selector).strip()
    return clean, (search.group(1) if search else None)


def safe_select(element, selector) -> list:
    """All descendants matching `selector`; invalid selectors match nothing."""
    if element is None or not is_valid_selector(selector):
        return []
    return element.select(selector)


def safe_select_one(element, selector):
    if element is None or not is_valid_selector(selector):
        return None
    return element.select_one(selector)


def split_template(source: str) -> tuple[Union[str, Placeholder], ...]:
    """Break template markup into literal text and placeholders, in order."""
    segments: list[Union[str, Placeholder]] = []
    position = 0
    for match in TEMPLATE_PATTERN.finditer(source):
        if match.start() > position:
            segments.append(source[position:match.start()])
        segments.append(Placeholder(expression=match.group(1).strip()))
        position = match.end()
    if position < len(source):
        segments.append(source[position:])
    return tuple(segments)


def classify_cell(spec: str) -> Union[SelectorCell, TemplateCell]:
    """
    Decide once whether a cell spec is a selector or a template.

    A spec is a selector cell when its selector part (markers removed) is a
    non-empty, valid CSS selector; anything else is template markup.
    """
    descriptor = parse_selector(spec)
    if descriptor.selector and is_valid_selector(descriptor.selector):
        return SelectorCell(descriptor=descriptor)
    return TemplateCell(source=spec, segments=split_template(spec))
