"""
Parse strategies.

A strategy turns one candidate element into block cells:

    strategy(element: Tag, context: ParseContext) -> BlockCells

Block rules name a strategy (or pass a callable); a rule without one uses the
strategy registered under its type, falling back to the generic block parser.
"""

from typing import Any, Callable, Optional

from . import block, carousel, columns, metadata

ParserFn = Callable[..., Any]

PARSERS: dict[str, ParserFn] = {
    "block": block.parse,
    "carousel": carousel.parse,
    "columns": columns.parse,
    "metadata": metadata.parse,
}


def get_parser(name: Optional[str]) -> Optional[ParserFn]:
    """Registered strategy for `name`, or None."""
    if not name:
        return None
    return PARSERS.get(name)


def parser_name(fn: ParserFn) -> Optional[str]:
    """Registered name of a strategy callable, or None."""
    for name, registered in PARSERS.items():
        if registered is fn:
            return name
    return None


def resolve_parser(block_type: str, parse=None) -> ParserFn:
    """Strategy for a block rule: explicit parse, then by type, then the block parser."""
    if callable(parse):
        return parse
    return get_parser(parse) or get_parser(block_type) or block.parse


__all__ = ["PARSERS", "ParserFn", "get_parser", "parser_name", "resolve_parser"]
