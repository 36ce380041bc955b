"""
Document loading and markup sanitization.

- parse_document: builds the live BeautifulSoup tree the pipeline mutates
- HtmlSanitizer:  strips unsafe constructs from template markup before it is
                  parsed into a fragment and inserted into the live tree
- detect_charset_from_bytes: browser-equivalent charset of raw HTML bytes

Design principle: NEVER FAIL on bad HTML when loading.  Sanitizer failures are
reported as SanitizerError so the cell evaluator can drop the one template.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup
from lxml import etree
from lxml.html import fragment_fromstring, tostring
from lxml.html.clean import Cleaner

from .exceptions import SanitizerError
from .logger import get_module_logger

logger = get_module_logger("sanitizer")

DEFAULT_PARSER = "html5lib"

# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}

# Control characters other than tab, newline and carriage return
CONTROL_CHARS = ''.join(chr(c) for c in range(32) if c not in (9, 10, 13))


def detect_charset_from_bytes(raw_bytes: bytes) -> str:
    """
    Detect the charset declared in the first 2048 bytes of an HTML document.

    Looks for <meta charset=...> and the legacy http-equiv Content-Type form,
    then applies the WHATWG mapping.  Returns 'utf-8' when nothing is declared.
    """
    head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

    m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
    if not m:
        m = re.search(
            r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
            head_str, re.IGNORECASE
        )
    if not m:
        return 'utf-8'

    charset = m.group(1).strip().lower()
    return WHATWG_CHARSET_MAP.get(charset, charset)


def normalize_markup(html: str) -> str:
    """String-level fixes applied before parsing: NULL bytes, line endings, control chars."""
    normalized = html.replace('\x00', '')
    normalized = normalized.replace('\r\n', '\n').replace('\r', '\n')
    if any(c in normalized for c in CONTROL_CHARS):
        normalized = normalized.translate(str.maketrans('', '', CONTROL_CHARS))
    return normalized


def parse_document(html: str, parser: Optional[str] = None) -> BeautifulSoup:
    """
    Parse HTML into the live document tree.

    Parser fallback chain: requested parser (html5lib by default) → lxml →
    html.parser.  html5lib follows the WHATWG algorithm and always produces
    <html>, <head> and <body>, which the pipeline relies on for its root
    fallback.
    """
    markup = normalize_markup(html or "")
    chain = [parser or DEFAULT_PARSER]
    chain.extend(p for p in ('lxml', 'html.parser') if p not in chain)

    for index, name in enumerate(chain):
        try:
            return BeautifulSoup(markup, name)
        except Exception as e:
            if index == len(chain) - 1:
                raise
            logger.warning(f"{name} parsing failed, trying {chain[index + 1]}: {e}")


def parse_fragment(markup: str, parser: Optional[str] = None):
    """Parse a markup fragment; returns the element holding its top-level nodes."""
    soup = parse_document(markup, parser)
    return soup.body if soup.body is not None else soup


class HtmlSanitizer:
    """
    Removes unsafe constructs from markup fragments.

    Scripts, javascript: URLs, on* handlers, embedded objects, frames and
    comments go; structure, forms, inline styles and ordinary attributes stay.
    """

    def __init__(self, allow_forms: bool = True):
        self._cleaner = Cleaner(
            scripts=True,
            javascript=True,
            comments=True,
            style=True,
            inline_style=False,
            links=True,
            meta=True,
            page_structure=False,
            processing_instructions=True,
            embedded=True,
            frames=True,
            forms=not allow_forms,
            annoying_tags=True,
            remove_unknown_tags=True,
            safe_attrs_only=False,
        )

    def sanitize(self, markup: str) -> str:
        """Return `markup` with unsafe constructs removed."""
        if not markup or not markup.strip():
            return ""
        try:
            # Wrap so text and sibling elements at the top level survive intact
            wrapper = fragment_fromstring(markup, create_parent="div")
            self._cleaner(wrapper)
            cleaned = tostring(wrapper, encoding="unicode", method="html")
        except (etree.LxmlError, ValueError) as e:
            raise SanitizerError(f"Could not sanitize markup: {e}", details={"markup": markup[:200]})

        if cleaned.startswith("<div>") and cleaned.endswith("</div>"):
            cleaned = cleaned[len("<div>"):-len("</div>")]
        return cleaned
