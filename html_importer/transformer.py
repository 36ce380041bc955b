"""
Rule-driven transformation of a live document.

Phases, strictly in order, over one document:
  1. root:    first match of rules.root, else <body>
  2. cleanup: remove rules.cleanup.start plus always-ignored tags
  3. blocks:  for each block rule, parse every candidate element into cells
              and insert the block the host builds from them
  4. cleanup: remove rules.cleanup.end

The document is mutated in place; ImportRules is only read.  A rule with no
candidates or empty cells contributes nothing, and invalid selectors are
filtered out before any query runs.
"""

from bs4 import BeautifulSoup, Tag

from .cells import is_empty
from .context import ParseContext, Source
from .dom import attribute_text, is_text_node
from .host import BlockHost
from .logger import get_module_logger
from .parsers import resolve_parser
from .schemas import AttributeSelector, BlockRule, ImportRules
from .selectors import (
    get_search_selector,
    is_text_selector,
    is_valid_selector,
    safe_select,
    safe_select_one,
)

logger = get_module_logger("transformer")

# Removed before block creation on every run
IGNORE_ELEMENTS = ("style", "source", "script", "noscript", "iframe")


def _kebab_case(name: str) -> str:
    return "".join(f"-{c.lower()}" if c.isupper() else c for c in name)


def _property_value(element: Tag, attribute: str, prop: str):
    """
    Value of `prop` on the object behind `attribute`.

    Only the style attribute exposes properties: its declarations, looked up
    by CSS name or camelCase name (fontSize → font-size).
    """
    if attribute != "style":
        return None
    declarations = {}
    for declaration in attribute_text(element.get("style")).split(";"):
        name, sep, value = declaration.partition(":")
        if sep:
            declarations[name.strip().lower()] = value.strip()
    return declarations.get(prop.lower(), declarations.get(_kebab_case(prop)))


def _match_by_property(element: Tag, cfg: AttributeSelector) -> bool:
    value = _property_value(element, cfg.attribute, cfg.property)
    return isinstance(value, str) and cfg.value in value


def _match_by_attribute(element: Tag, attribute: str, value: str) -> bool:
    return value in attribute_text(element.get(attribute))


class Transformer:
    """Runs an ImportRules document against a source document."""

    def __init__(self, host: BlockHost):
        self.host = host

    def transform(self, rules: ImportRules, source: Source) -> Tag:
        """
        Transform `source.document` in place.

        Args:
            rules: Rule document (read only)
            source: Document, URL and ambient params for this run

        Returns:
            The root element after transformation
        """
        document = source.document

        # Phase 1: root element
        main = self._resolve_root(document, rules.root)
        logger.info(f"Transforming {source.url or 'document'} (root: {main.name})")

        # Phase 2: DOM removal - start
        self.process_removal(main, [*rules.cleanup.start, *IGNORE_ELEMENTS])

        # Phase 3: block creation
        created = 0
        for rule in rules.blocks:
            created += self._apply_block_rule(main, rule, source)

        # Phase 4: DOM removal - end
        self.process_removal(main, rules.cleanup.end)

        logger.info(f"Created {created} blocks from {len(rules.blocks)} rules")
        return main

    @staticmethod
    def _resolve_root(document: BeautifulSoup, root) -> Tag:
        main = safe_select_one(document, root) if root else None
        if main is None:
            logger.debug(f"Root '{root}' not found, using body")
            main = document.body if document.body is not None else document
        return main

    def process_removal(self, main: Tag, selectors) -> None:
        """
        Remove elements and text matched by cleanup selectors.

        Element selectors go to the host in one call; "sel::text(literal)"
        removes direct text nodes equal to the literal (after trimming);
        AttributeSelector objects remove elements by attribute content.
        """
        element_selectors = [
            s for s in selectors
            if isinstance(s, str) and not is_text_selector(s) and is_valid_selector(s)
        ]
        if element_selectors:
            self.host.remove_elements(main, element_selectors)

        for selector in (s for s in selectors if is_text_selector(s)):
            search_selector, search_value = get_search_selector(selector)
            if search_value is None:
                continue
            for element in safe_select(main, search_selector):
                for node in list(element.children):
                    if is_text_node(node) and node.strip() == search_value:
                        node.extract()

        for cfg in (s for s in selectors if isinstance(s, AttributeSelector)):
            candidates = safe_select(main, f"[{cfg.attribute}]")
            if cfg.property and cfg.property != "-":
                matched = [el for el in candidates if _match_by_property(el, cfg)]
            else:
                matched = [el for el in candidates if _match_by_attribute(el, cfg.attribute, cfg.value)]
            for element in matched:
                element.extract()

    def _apply_block_rule(self, main: Tag, rule: BlockRule, source: Source) -> int:
        parser_fn = resolve_parser(rule.type, rule.parse)

        valid_selectors = [s for s in rule.selectors if is_valid_selector(s)]
        if valid_selectors:
            elements = [el for selector in valid_selectors for el in main.select(selector)]
        else:
            elements = [main]
        logger.debug(f"Block '{rule.type}': {len(elements)} candidate elements")

        created = 0
        for element in elements:
            context = ParseContext(
                document=source.document,
                host=self.host,
                url=source.url,
                params={**source.params, **rule.params},
            )
            items = parser_fn(element, context)
            if isinstance(items, list):
                items = [item for item in items if item]
            if items is None or is_empty(items):
                continue

            block = self.host.create_block(
                source.document,
                name=self.host.compute_block_name(rule.type),
                variants=list(rule.variants),
                cells=items,
            )
            if block is None:
                continue
            if self._insert(main, element, block, rule.insert_mode):
                created += 1
        return created

    @staticmethod
    def _insert(main: Tag, element: Tag, block: Tag, insert_mode: str) -> bool:
        if insert_mode == "append":
            main.append(block)
        elif insert_mode == "prepend":
            main.insert(0, block)
        elif element.parent is None:
            # Already detached by an earlier replacement
            logger.debug(f"Skipping replace of detached <{element.name}>")
            return False
        else:
            element.replace_with(block)
        return True
