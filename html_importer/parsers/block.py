"""Generic block parser: cells come straight from the rule's `cells` param."""

from ..cells import build_block_cells, build_block_config
from ..selectors import safe_select


def parse(element, context):
    """
    params.cells may be:
      - a selector string: every match becomes a one-element row
      - a list of rows (matrix mode)
      - a mapping of field specs (config mode)
    """
    cells = context.params.get("cells")
    if isinstance(cells, str):
        rows = safe_select(element, cells)
    elif cells:
        rows = cells
    else:
        rows = []

    if isinstance(rows, dict):
        return build_block_config(element, rows, sanitizer=context.host)
    if isinstance(rows, (list, tuple)):
        return build_block_cells(element, list(rows), sanitizer=context.host)
    return []
