"""
Metadata parser.

Merges the host's page metadata with fields from the rule's `cells` mapping
(rule fields win), then normalizes:
  - Image: first entry of a comma-separated src list
  - date-like values: YYYY-MM-DD
"""

import re
from datetime import datetime
from typing import Optional

from bs4 import Tag
from dateutil import parser as date_parser

from ..cells import is_block_config
from ..dom import element_children
from . import block

DIGIT_PATTERN = re.compile(r"\d")

# Missing date parts come from these, never from the clock
DEFAULT_DATE = datetime(2001, 1, 1)
OTHER_DEFAULT_DATE = datetime(2002, 2, 2)


def _first_image_source(value) -> None:
    if not isinstance(value, Tag):
        return
    img = value if value.name == "img" else value.find("img")
    if img is None or not img.get("src"):
        return
    img["src"] = img["src"].split(",")[0].strip()


def to_iso_date(value) -> Optional[str]:
    """ISO date for date-like text (a string or a text-only element), else None."""
    if isinstance(value, Tag):
        if element_children(value):
            return None
        value = value.get_text()
    if not isinstance(value, str):
        return None

    text = value.strip()
    # Bare numbers and wordy text are not dates
    if not DIGIT_PATTERN.search(text) or text.isdigit():
        return None
    try:
        parsed = date_parser.parse(text, default=DEFAULT_DATE)
        # A year taken from the default means the text named no year
        if date_parser.parse(text, default=OTHER_DEFAULT_DATE).year != parsed.year:
            return None
    except (ValueError, OverflowError):
        return None
    return parsed.date().isoformat()


def parse(element, context):
    base = context.host.get_metadata(context.document) or {}
    custom = block.parse(element, context)
    if not is_block_config(custom):
        custom = {}

    meta = {**base, **custom}
    for key, value in list(meta.items()):
        if key == "Image":
            _first_image_source(value)
        iso_date = to_iso_date(value)
        if iso_date:
            meta[key] = iso_date
    return meta
