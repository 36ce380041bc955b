"""
Cell evaluation and block cell construction.

A cell spec is either a selector ("h1", "img[src]", "p::text",
"li::text:nth-child(2)", "dt + *::text") or template markup with
"{{selector}}" placeholders.  Evaluating a spec against an element yields
cell values:

    str        text extracted from a match (or the literal fallback)
    Tag        a matched element kept as-is, or a parsed template fragment
    list       several values from one selector

Two output shapes are built from cells:

    matrix  list of rows, each row a list of columns    (build_block_cells)
    config  mapping of field name -> <p> container      (build_block_config)
"""

import re
from typing import Optional, Protocol, Union

from bs4 import Tag

from .dom import attribute_text, is_text_node, node_text, owner_document
from .exceptions import SanitizerError
from .logger import get_module_logger
from .sanitizer import HtmlSanitizer, parse_fragment
from .schemas import CellParams, Placeholder, SelectorCell, SelectorDescriptor, TemplateCell
from .selectors import (
    classify_cell,
    is_attribute_selector,
    is_valid_selector,
    parse_selector,
    safe_select_one,
)

logger = get_module_logger("cells")

CellValue = Union[str, Tag, list]
BlockCellArray = list
BlockConfig = dict
BlockCells = Union[BlockCellArray, BlockConfig]

# Spec or list of specs per column / row
CellSpec = Union[str, list]
# field -> spec | [[condition, spec, params], ...]
BlockConfigMapping = dict


class Sanitizer(Protocol):
    def sanitize(self, markup: str) -> str: ...


_default_sanitizer: Optional[HtmlSanitizer] = None


def _get_sanitizer(sanitizer: Optional[Sanitizer]) -> Sanitizer:
    global _default_sanitizer
    if sanitizer is not None:
        return sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = HtmlSanitizer()
    return _default_sanitizer


# --- Text extraction ---

def _element_text(element: Tag, descriptor: SelectorDescriptor) -> str:
    if not descriptor.use_text and descriptor.attribute:
        return attribute_text(element.get(descriptor.attribute))
    if descriptor.child_index:
        text_nodes = [child for child in element.children if is_text_node(child)]
        if descriptor.child_index <= len(text_nodes):
            return str(text_nodes[descriptor.child_index - 1])
        return ""
    if descriptor.use_sibling_text:
        return node_text(element.next_sibling)
    # <meta> has no text; fall back to its content attribute
    return element.get_text() or attribute_text(element.get("content"))


def _post_process(text: str, params: CellParams) -> str:
    if params.replace:
        pattern = params.replace[0]
        replacement = params.replace[1] if len(params.replace) > 1 else ""
        try:
            text = re.sub(pattern, replacement, text, count=1).strip()
        except re.error as e:
            logger.warning(f"Ignoring replace pattern '{pattern}': {e}")

    if params.split:
        delimiter = params.split[0]
        part_index = params.split[1] if len(params.split) > 1 else 0
        parts = text.split(delimiter) if delimiter else list(text)
        parts = [part for part in parts if part]
        if 0 <= part_index < len(parts):
            text = parts[part_index]

    return text.strip()


# --- Cell evaluation ---

def _evaluate_selector(element: Tag, cell: SelectorCell, params: CellParams) -> CellValue:
    descriptor = cell.descriptor
    as_text = descriptor.use_text or is_attribute_selector(descriptor.selector) or bool(params.replace)

    values = []
    for match in element.select(descriptor.selector):
        if as_text or not match.contents:
            values.append(_post_process(_element_text(match, descriptor), params))
        else:
            values.append(match)

    # No match: the selector itself stands in as a literal value
    if not values:
        return descriptor.selector
    if len(values) == 1:
        return values[0]
    return values


def _resolve_placeholder(element: Tag, placeholder: Placeholder) -> str:
    expression = placeholder.expression
    if not is_valid_selector(expression):
        return expression

    match = safe_select_one(element, expression)
    if match is None:
        return ""
    if is_attribute_selector(expression):
        return _element_text(match, parse_selector(expression))
    return match.decode_contents()


def _evaluate_template(element: Tag, cell: TemplateCell, sanitizer: Sanitizer) -> Optional[Tag]:
    markup = "".join(
        _resolve_placeholder(element, segment) if isinstance(segment, Placeholder) else segment
        for segment in cell.segments
    )
    try:
        markup = sanitizer.sanitize(markup)
    except SanitizerError as e:
        logger.warning(f"Dropping template cell: {e.message}")
        return None

    fragment = parse_fragment(markup)
    first = next((node for node in fragment.children if isinstance(node, Tag)), None)
    return first.extract() if first is not None else None


def evaluate_cell(
    element: Tag,
    cell: Optional[CellSpec],
    params: Optional[Union[CellParams, dict]] = None,
    sanitizer: Optional[Sanitizer] = None
) -> list[CellValue]:
    """
    Evaluate a selector or template spec (or a list of them) against `element`.

    Args:
        element: Element the selectors are scoped to
        cell: Spec string or list of spec strings
        params: Optional replace/split post-processing for extracted text
        sanitizer: Sanitizes template markup (defaults to HtmlSanitizer)

    Returns:
        One value per spec that produced something, in spec order
    """
    if not cell:
        return []
    if not isinstance(params, CellParams):
        params = CellParams.model_validate(params or {})
    sanitizer = _get_sanitizer(sanitizer)

    specs = cell if isinstance(cell, (list, tuple)) else [cell]
    results = []
    for spec in specs:
        if isinstance(spec, Tag):
            results.append(spec)
            continue
        parsed = classify_cell(spec)
        if isinstance(parsed, SelectorCell):
            value = _evaluate_selector(element, parsed, params)
        else:
            value = _evaluate_template(element, parsed, sanitizer)
        if value is not None:
            results.append(value)
    return results


# --- Block cell construction ---

def _has_content(column) -> bool:
    if isinstance(column, (list, tuple)):
        return len(column) > 0
    if isinstance(column, Tag):
        return True
    return bool(column)


def _flatten(values: list) -> list:
    flat = []
    for value in values:
        if isinstance(value, (list, tuple)):
            flat.extend(value)
        else:
            flat.append(value)
    return flat


def build_block_cells(element: Tag, rows: list, sanitizer: Optional[Sanitizer] = None) -> BlockCellArray:
    """
    Build a matrix of cells.

    Each row is an element (kept as a one-column row), a list of column specs
    (each evaluated on its own) or a single spec (evaluated as the row).  Rows
    in which no column produced anything are dropped.
    """
    cells = []
    for row in rows:
        if isinstance(row, Tag):
            cells.append([row])
            continue
        if isinstance(row, (list, tuple)):
            columns = [evaluate_cell(element, column, sanitizer=sanitizer) for column in row]
        else:
            columns = evaluate_cell(element, row, sanitizer=sanitizer)
        if any(_has_content(column) for column in columns):
            cells.append(columns)
    return cells


def _select_field_spec(element: Tag, entries: list):
    """First [condition, spec, params] entry whose condition matches, else None."""
    for entry in entries:
        if not entry:
            continue
        condition = entry[0]
        if safe_select_one(element, condition) is not None:
            spec = entry[1] if len(entry) > 1 else None
            params = entry[2] if len(entry) > 2 else None
            return spec, params
    return None


def build_block_config(
    element: Tag,
    fields: BlockConfigMapping,
    sanitizer: Optional[Sanitizer] = None
) -> BlockConfig:
    """
    Build a name/value block configuration.

    fields maps a name to a spec, or to a list of [condition, spec, params]
    entries where the first entry whose condition selector matches wins.  A
    field whose entries all fail to match is omitted; a field whose spec
    matched but produced nothing still gets an empty container.
    """
    document = owner_document(element)
    config = {}
    for name, value in fields.items():
        if isinstance(value, (list, tuple)):
            selected = _select_field_spec(element, value)
            if selected is None:
                logger.debug(f"No condition matched for field '{name}'")
                continue
            spec, params = selected
        else:
            spec, params = value, None

        container = document.new_tag("p")
        for node in _flatten(evaluate_cell(element, spec, params, sanitizer)):
            container.append(node)
        config[name] = container
    return config


# --- Shape predicates ---

def is_empty(cells) -> bool:
    """Empty means a zero-length matrix or a mapping without keys."""
    if isinstance(cells, (list, tuple)):
        return len(cells) == 0
    if isinstance(cells, dict):
        return len(cells) == 0
    return False


def is_block_cell_array(cells) -> bool:
    return isinstance(cells, list)


def is_block_config(cells) -> bool:
    return isinstance(cells, dict)
