"""
Host capabilities consumed by the transformation pipeline.

The pipeline never builds final block markup, page metadata or output paths
itself; it calls a BlockHost.  Each capability is an abstract method so an
embedding environment can supply its own implementation, and DefaultBlockHost
provides a table-based one so the importer runs end to end on its own.
"""

import re
import unicodedata
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import unquote

from bs4 import BeautifulSoup, NavigableString, Tag

from .cells import BlockCells, is_empty
from .logger import get_module_logger
from .sanitizer import HtmlSanitizer
from .selectors import safe_select, safe_select_one

logger = get_module_logger("host")


class BlockHost(ABC):
    """Abstract base class for host capabilities."""

    @abstractmethod
    def create_block(
        self,
        document: BeautifulSoup,
        name: str,
        variants: Optional[list[str]] = None,
        cells: Optional[BlockCells] = None
    ) -> Optional[Tag]:
        """
        Materialize cell data into a block element.

        Args:
            document: Document the block will be inserted into
            name: Display name of the block
            variants: Optional variant names
            cells: Matrix (list of rows) or config mapping

        Returns:
            The block element, or None when no block could be built
        """
        pass

    @abstractmethod
    def compute_block_name(self, block_type: str) -> str:
        """Canonical display name for a block rule type."""
        pass

    @abstractmethod
    def get_metadata(self, document: BeautifulSoup) -> dict:
        """Baseline page metadata; values are strings or elements."""
        pass

    @abstractmethod
    def remove_elements(self, root: Tag, selectors: list[str]) -> None:
        """Remove every element under `root` matching any of `selectors`."""
        pass

    @abstractmethod
    def sanitize_path(self, path: str) -> str:
        """Normalize an output document path."""
        pass

    @abstractmethod
    def sanitize(self, markup: str) -> str:
        """Strip unsafe constructs from markup before it is parsed."""
        pass


class DefaultBlockHost(BlockHost):
    """
    Reference host.

    Blocks are tables: a header row with the block name (and variants in
    parentheses), then one row per cell row, or one [key, value] row per
    field for config cells.
    """

    def __init__(self, sanitizer: Optional[HtmlSanitizer] = None):
        self.sanitizer = sanitizer or HtmlSanitizer()

    def create_block(self, document, name, variants=None, cells=None):
        if cells is None or is_empty(cells):
            return None

        header = f"{name} ({', '.join(variants)})" if variants else name
        if isinstance(cells, dict):
            rows = [[key, value] for key, value in cells.items()]
        else:
            rows = [row if isinstance(row, (list, tuple)) else [row] for row in cells]

        table = document.new_tag("table")
        header_row = document.new_tag("tr")
        header_cell = document.new_tag("th")
        header_cell.string = header
        width = max((len(row) for row in rows), default=1)
        if width > 1:
            header_cell["colspan"] = str(width)
        header_row.append(header_cell)
        table.append(header_row)

        for row in rows:
            tr = document.new_tag("tr")
            for cell in row:
                td = document.new_tag("td")
                self._fill_cell(td, cell)
                tr.append(td)
            table.append(tr)

        logger.debug(f"Created block '{header}' with {len(rows)} rows")
        return table

    def _fill_cell(self, td: Tag, value) -> None:
        if value is None:
            return
        if isinstance(value, (list, tuple)):
            for item in value:
                self._fill_cell(td, item)
        elif isinstance(value, Tag):
            td.append(value)
        else:
            # Extracted text is already entity-decoded; it must stay text
            td.append(NavigableString(str(value)))

    def compute_block_name(self, block_type: str) -> str:
        name = re.sub(r"\s(.)", lambda m: m.group(0).upper(), block_type.replace("-", " "))
        return name[:1].upper() + name[1:]

    def get_metadata(self, document):
        meta = {}

        title = safe_select_one(document, "title")
        og_title = self._meta_content(document, "og:title")
        if title is not None and title.get_text().strip():
            meta["Title"] = re.sub(r"[\n\t]", "", title.get_text())
        elif og_title:
            meta["Title"] = og_title

        description = self._meta_content(document, "description") or self._meta_content(document, "og:description")
        if description:
            meta["Description"] = description

        image = self._meta_content(document, "og:image")
        if image:
            img = document.new_tag("img", src=image)
            meta["Image"] = img

        return meta

    @staticmethod
    def _meta_content(document, name: str) -> str:
        attr = "property" if ":" in name else "name"
        meta = safe_select_one(document, f'meta[{attr}="{name}"]')
        if meta is None:
            return ""
        content = meta.get("content", "")
        return content.strip() if isinstance(content, str) else ""

    def remove_elements(self, root, selectors):
        for selector in selectors:
            for element in safe_select(root, selector):
                element.extract()

    def sanitize_path(self, path: str) -> str:
        if not path:
            return path
        stem, dot, extension = path.rpartition(".")
        if not dot or "/" in extension:
            stem, extension = path, ""

        sanitized = "".join(
            f"/{self._sanitize_filename(segment)}" for segment in stem.split("/") if segment
        )
        if extension:
            sanitized += f".{extension}"
        return sanitized

    @staticmethod
    def _sanitize_filename(name: str) -> str:
        name = unicodedata.normalize("NFD", unquote(name).lower())
        name = "".join(c for c in name if not unicodedata.combining(c))
        return re.sub(r"[^a-z0-9]+", "-", name).strip("-")

    def sanitize(self, markup: str) -> str:
        return self.sanitizer.sanitize(markup)
