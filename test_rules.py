"""Tests for the rule document models and ImportRuleBuilder."""

import pytest
from pydantic import ValidationError

from html_importer.parsers import carousel
from html_importer.rules import ImportRuleBuilder
from html_importer.schemas import AttributeSelector, BlockRule, ImportRules


def test_default_document():
    rules = ImportRuleBuilder().build()
    assert rules.model_dump() == {
        "root": "main",
        "cleanup": {"start": [], "end": []},
        "blocks": [],
        "transformers": [],
    }


def test_builder_from_dict():
    builder = ImportRuleBuilder({"root": "article", "blocks": [{"type": "hero", "selectors": [".hero"]}]})
    rules = builder.build()
    assert rules.root == "article"
    assert builder.find_block("hero").selectors == [".hero"]
    assert builder.find_block("cards") is None


def test_set_root():
    assert ImportRuleBuilder().set_root("#content").build().root == "#content"
    assert ImportRuleBuilder().set_root(None).build().root is None


# --- cleanup ---

def test_cleanup_union_without_duplicates():
    rules = (
        ImportRuleBuilder()
        .add_cleanup(["nav", "footer"])
        .add_cleanup("nav")
        .add_cleanup(["aside", "footer"])
        .build()
    )
    assert rules.cleanup.start == ["nav", "footer", "aside"]
    assert rules.cleanup.end == []


def test_loaded_cleanup_lists_are_deduplicated():
    builder = ImportRuleBuilder({"cleanup": {"start": ["nav", "nav", "aside"], "end": [".share", ".share"]}})
    rules = builder.build()
    assert rules.cleanup.start == ["nav", "aside"]
    assert rules.cleanup.end == [".share"]


def test_cleanup_end_phase():
    rules = ImportRuleBuilder().add_cleanup(".share", phase="end").build()
    assert rules.cleanup.start == []
    assert rules.cleanup.end == [".share"]


def test_cleanup_attribute_selectors():
    rules = (
        ImportRuleBuilder()
        .add_cleanup({"attribute": "style", "property": "display", "value": "none"})
        .add_cleanup(AttributeSelector(attribute="style", property="display", value="none"))
        .add_cleanup([{"attribute": "class", "value": "ad"}, "nav"])
        .build()
    )
    assert rules.cleanup.start == [
        AttributeSelector(attribute="style", property="display", value="none"),
        AttributeSelector(attribute="class", value="ad"),
        "nav",
    ]


def test_cleanup_unknown_phase():
    with pytest.raises(ValueError, match="middle"):
        ImportRuleBuilder().add_cleanup("nav", phase="middle")


# --- blocks ---

def test_add_block_appends_new_types():
    rules = (
        ImportRuleBuilder()
        .add_block({"type": "hero", "selectors": [".hero"]})
        .add_block(BlockRule(type="cards", selectors=[".cards"]))
        .build()
    )
    assert [rule.type for rule in rules.blocks] == ["hero", "cards"]
    assert rules.blocks[0].insert_mode == "replace"
    assert rules.blocks[0].variants == []
    assert rules.blocks[0].params == {}


def test_add_block_merges_same_type():
    rules = (
        ImportRuleBuilder()
        .add_block({"type": "hero", "selectors": [".a"], "variants": ["dark"], "params": {"x": 1}})
        .add_block({"type": "cards", "selectors": [".c"]})
        .add_block({"type": "hero", "selectors": [".a", ".b"], "variants": ["wide", "dark"],
                    "params": {"y": 2}, "insert_mode": "append"})
        .build()
    )
    # The merged rule keeps the slot of the first hero rule
    assert [rule.type for rule in rules.blocks] == ["hero", "cards"]
    hero = rules.blocks[0]
    assert hero.selectors == [".a", ".b"]
    assert hero.variants == ["dark", "wide"]
    assert hero.params == {"y": 2}
    assert hero.insert_mode == "append"


def test_add_block_merge_keeps_fields_not_given():
    rules = (
        ImportRuleBuilder()
        .add_block({"type": "hero", "selectors": [".hero"], "parse": "carousel",
                    "insert_mode": "append", "params": {"cells": [["h1::text"]]}})
        .add_block({"type": "hero", "selectors": [".banner"]})
        .build()
    )
    [hero] = rules.blocks
    assert hero.selectors == [".hero", ".banner"]
    assert hero.parse == "carousel"
    assert hero.insert_mode == "append"
    assert hero.params == {"cells": [["h1::text"]]}


def test_add_block_merge_explicit_defaults_still_win():
    rules = (
        ImportRuleBuilder()
        .add_block({"type": "hero", "insert_mode": "append", "params": {"cells": "h1"}})
        .add_block(BlockRule(type="hero", insert_mode="replace", params={}))
        .build()
    )
    assert rules.blocks[0].insert_mode == "replace"
    assert rules.blocks[0].params == {}


def test_unknown_insert_mode_rejected():
    with pytest.raises(ValidationError):
        BlockRule(type="hero", insert_mode="before")


# --- parse strategies ---

def test_unknown_parse_name_rejected():
    with pytest.raises(ValidationError, match="unknown parse strategy"):
        BlockRule(type="hero", parse="slideshow")


def test_parse_serialized_by_name():
    rule = BlockRule(type="gallery", parse=carousel.parse)
    assert rule.model_dump(mode="json")["parse"] == "carousel"
    assert BlockRule(type="gallery", parse="columns").model_dump(mode="json")["parse"] == "columns"


def test_unregistered_callable_not_persisted():
    rule = BlockRule(type="gallery", parse=lambda element, context: [])
    assert rule.model_dump(mode="json")["parse"] is None


# --- transformers ---

def test_add_transformer_replaces_by_name():
    builder = (
        ImportRuleBuilder()
        .add_transformer({"name": "links"})
        .add_transformer({"name": "images"})
        .add_transformer({"name": "links"})
    )
    rules = builder.build()
    assert [rule.name for rule in rules.transformers] == ["links", "images"]
    assert builder.find_transformer("images").name == "images"
    assert builder.find_transformer("tables") is None


# --- snapshots ---

def test_build_returns_independent_snapshots():
    builder = ImportRuleBuilder().add_block({"type": "hero", "selectors": [".hero"]})
    first = builder.build()

    builder.add_block({"type": "hero", "selectors": [".banner"]}).add_cleanup("nav").set_root("article")
    second = builder.build()

    assert first.blocks[0].selectors == [".hero"]
    assert first.cleanup.start == []
    assert first.root == "main"
    assert second.blocks[0].selectors == [".hero", ".banner"]
    assert second.root == "article"


def test_rule_documents_are_frozen():
    rules = ImportRuleBuilder().build()
    with pytest.raises(ValidationError):
        rules.root = "article"


def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        ImportRules.model_validate({"root": "main", "bogus": True})
    with pytest.raises(ValidationError):
        AttributeSelector.model_validate({"attribute": "class", "colour": "red"})
