"""
ImportRuleBuilder: accumulates one rule document.

The builder owns its working state; build() hands out an independent,
frozen ImportRules snapshot, so later builder calls never change a document
that was already passed to a Transformer.
"""

from typing import Iterable, Literal, Optional, Union

from .logger import get_module_logger
from .schemas import AttributeSelector, BlockRule, Cleanup, ImportRules, TransformRule

logger = get_module_logger("rules")

CleanupPhase = Literal["start", "end"]


def _union(first: Iterable, second: Iterable) -> list:
    """Ordered union without duplicates."""
    merged = []
    for item in [*first, *second]:
        if item not in merged:
            merged.append(item)
    return merged


def _as_cleanup_selector(selector):
    if isinstance(selector, dict):
        return AttributeSelector.model_validate(selector)
    return selector


class ImportRuleBuilder:
    """Builder for ImportRules with merge-safe mutations."""

    def __init__(self, rules: Optional[Union[ImportRules, dict]] = None):
        if rules is None:
            rules = ImportRules()
        elif isinstance(rules, dict):
            rules = ImportRules.model_validate(rules)

        self._root = rules.root
        self._cleanup = {
            "start": _union(rules.cleanup.start, []),
            "end": _union(rules.cleanup.end, []),
        }
        self._blocks: list[BlockRule] = list(rules.blocks)
        self._transformers: list[TransformRule] = list(rules.transformers)

    def set_root(self, selector: Optional[str]) -> "ImportRuleBuilder":
        self._root = selector
        return self

    def add_cleanup(self, selectors, phase: CleanupPhase = "start") -> "ImportRuleBuilder":
        """Union `selectors` (one or many) into the cleanup list for `phase`."""
        if phase not in self._cleanup:
            raise ValueError(f"Unknown cleanup phase '{phase}' (expected 'start' or 'end')")
        if isinstance(selectors, (str, dict, AttributeSelector)):
            selectors = [selectors]

        target = self._cleanup[phase]
        for selector in selectors:
            selector = _as_cleanup_selector(selector)
            if selector not in target:
                target.append(selector)
        return self

    def add_block(self, rule: Union[BlockRule, dict]) -> "ImportRuleBuilder":
        """
        Add a block rule, merging into an existing rule of the same type.

        On a merge the fields the new rule sets explicitly replace the old ones,
        except selectors and variants, which become the ordered union of both.
        Fields left at their defaults keep the old values.  The merged rule
        keeps the slot of the first rule of that type.
        """
        if not isinstance(rule, BlockRule):
            rule = BlockRule.model_validate(rule)

        for index, existing in enumerate(self._blocks):
            if existing.type == rule.type:
                explicit = {name: getattr(rule, name) for name in rule.model_fields_set}
                self._blocks[index] = existing.model_copy(update={
                    **explicit,
                    "selectors": _union(existing.selectors, rule.selectors),
                    "variants": _union(existing.variants, rule.variants),
                })
                logger.debug(f"Merged block rule '{rule.type}'")
                return self

        self._blocks.append(rule)
        return self

    def add_transformer(self, rule: Union[TransformRule, dict]) -> "ImportRuleBuilder":
        """Add a transformer, replacing one with the same name."""
        if not isinstance(rule, TransformRule):
            rule = TransformRule.model_validate(rule)

        for index, existing in enumerate(self._transformers):
            if existing.name == rule.name:
                self._transformers[index] = rule
                return self

        self._transformers.append(rule)
        return self

    def find_block(self, block_type: str) -> Optional[BlockRule]:
        return next((rule for rule in self._blocks if rule.type == block_type), None)

    def find_transformer(self, name: str) -> Optional[TransformRule]:
        return next((rule for rule in self._transformers if rule.name == name), None)

    def build(self) -> ImportRules:
        """Current state as an independent ImportRules snapshot."""
        return ImportRules(
            root=self._root,
            cleanup=Cleanup(start=list(self._cleanup["start"]), end=list(self._cleanup["end"])),
            blocks=list(self._blocks),
            transformers=list(self._transformers),
        ).model_copy(deep=True)
