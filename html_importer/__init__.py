"""
HTML Importer Framework

Re-expresses a generic web page as a small number of typed content blocks,
driven by a declarative rule document.
- Selectors:   selector micro-language (::text, [attr], {{templates}})
- Cells:       selector/template evaluation into matrix or config cells
- Rules:       ImportRules document and its builder
- Transformer: four-phase rewrite of a live document

Public API surface:
  Pipeline        - HTMLImporter, Transformer, TransformFactory
  Rules           - ImportRuleBuilder, ImportRules, BlockRule, RuleStore
  Cells           - evaluate_cell, build_block_cells, build_block_config
  Host            - BlockHost, DefaultBlockHost, HtmlSanitizer
  Error types     - RuleDocumentError (fatal), SanitizerError (non-fatal)
"""

# --- Pipeline ---
from .main import HTMLImporter
from .transformer import Transformer
from .factory import TransformFactory, TransformationResult, generate_document_path
from .context import ParseContext, Source

# --- Rules ---
from .schemas import (
    AttributeSelector,
    BlockRule,
    Cleanup,
    ImportRules,
    SelectorDescriptor,
    TransformRule,
)
from .rules import ImportRuleBuilder
from .rule_store import RuleStore, get_default_store, load_rules, dump_rules

# --- Cells and selectors ---
from .cells import build_block_cells, build_block_config, evaluate_cell, is_empty
from .selectors import is_valid_selector, parse_selector
from .parsers import PARSERS, get_parser

# --- Host capabilities ---
from .host import BlockHost, DefaultBlockHost
from .sanitizer import HtmlSanitizer, parse_document

# --- Exceptions ---
from .exceptions import ImporterError, RuleDocumentError, SanitizerError

__version__ = "0.1.0"
__all__ = [
    "HTMLImporter",
    "Transformer",
    "TransformFactory",
    "TransformationResult",
    "generate_document_path",
    "ParseContext",
    "Source",
    "AttributeSelector",
    "BlockRule",
    "Cleanup",
    "ImportRules",
    "SelectorDescriptor",
    "TransformRule",
    "ImportRuleBuilder",
    "RuleStore",
    "get_default_store",
    "load_rules",
    "dump_rules",
    "build_block_cells",
    "build_block_config",
    "evaluate_cell",
    "is_empty",
    "is_valid_selector",
    "parse_selector",
    "PARSERS",
    "get_parser",
    "BlockHost",
    "DefaultBlockHost",
    "HtmlSanitizer",
    "parse_document",
    "ImporterError",
    "RuleDocumentError",
    "SanitizerError",
]
