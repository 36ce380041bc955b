"""
Pydantic schemas defining the rule document and the selector micro-language.

ImportRules is the single persisted artifact of the rule subsystem: the
ImportRuleBuilder produces it, the RuleStore saves it, and the Transformer
reads it.  All models are frozen; a pipeline run never mutates its rules.

Data flow through the pipeline:
  ImportRuleBuilder → ImportRules → Transformer → parse strategy → cells
"""

from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .logger import get_module_logger

logger = get_module_logger("schemas")


# --- Selector micro-language ---

class SelectorDescriptor(BaseModel):
    """A raw selector string split into a CSS selector plus extraction flags."""
    model_config = ConfigDict(frozen=True)

    selector: str
    use_text: bool = False            # "::text" marker present
    use_sibling_text: bool = False    # "+ *::text": text of the following sibling
    child_index: Optional[int] = Field(default=None, gt=0)  # "::text:nth-child(N)", 1-based
    attribute: Optional[str] = None   # trailing "[attr]" predicate


class Placeholder(BaseModel):
    """A "{{expression}}" slot inside a template cell."""
    model_config = ConfigDict(frozen=True)

    expression: str


class SelectorCell(BaseModel):
    """Cell spec whose selector part is a valid CSS selector."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["selector"] = "selector"
    descriptor: SelectorDescriptor


class TemplateCell(BaseModel):
    """Cell spec treated as markup with optional placeholders."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["template"] = "template"
    source: str
    segments: tuple[Union[str, Placeholder], ...] = ()


class CellParams(BaseModel):
    """
    Post-processing applied to text extracted by a selector cell.

    replace: [pattern, replacement] - one regex substitution (Python re syntax)
    split:   [delimiter, part_index] - keep one non-empty part
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    replace: Optional[Union[tuple[str, str], tuple[str]]] = None
    split: Optional[Union[tuple[str, int], tuple[str]]] = None


# --- Cleanup selectors ---

class AttributeSelector(BaseModel):
    """
    Structured removal selector.

    Matches elements carrying `attribute`.  With a `property` (other than "-")
    the property value of that attribute is compared, otherwise the raw
    attribute value; both by substring containment.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    attribute: str
    property: Optional[str] = None
    value: str = ""


CleanupSelector = Union[str, AttributeSelector]


class Cleanup(BaseModel):
    """Selectors removed before (start) and after (end) block creation."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: list[CleanupSelector] = Field(default_factory=list)
    end: list[CleanupSelector] = Field(default_factory=list)


# --- Rules ---

InsertMode = Literal["replace", "append", "prepend"]


class BlockRule(BaseModel):
    """How to find candidate elements and turn each into one block."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str
    variants: list[str] = Field(default_factory=list)
    selectors: list[str] = Field(default_factory=list)
    # Registered strategy name or a callable(element, context) -> BlockCells
    parse: Optional[Union[str, Callable[..., Any]]] = None
    params: dict[str, Any] = Field(default_factory=dict)
    insert_mode: InsertMode = "replace"

    @field_validator("parse")
    @classmethod
    def _known_parser(cls, value):
        if isinstance(value, str):
            # Imported here: the parsers package imports this module
            from .parsers import get_parser
            if get_parser(value) is None:
                raise ValueError(f"unknown parse strategy '{value}'")
        return value

    @field_serializer("parse")
    def _serialize_parse(self, parse, _info):
        if parse is None or isinstance(parse, str):
            return parse
        from .parsers import parser_name
        name = parser_name(parse)
        if name is None:
            logger.warning(
                f"Parse strategy {getattr(parse, '__name__', parse)!r} for block "
                f"'{self.type}' is not registered and will not be persisted"
            )
        return name


class TransformRule(BaseModel):
    """Named transformer entry (placeholder, carried through unchanged)."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str


class ImportRules(BaseModel):
    """The rule document driving one pipeline run."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Optional[str] = "main"
    cleanup: Cleanup = Field(default_factory=Cleanup)
    blocks: list[BlockRule] = Field(default_factory=list)
    transformers: list[TransformRule] = Field(default_factory=list)
