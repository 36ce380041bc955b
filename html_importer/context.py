"""
Values handed through one pipeline run.

Source describes the page being imported; ParseContext is what a parse
strategy receives for one candidate element (source plus merged params and
the host capabilities).
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup

if TYPE_CHECKING:
    from .host import BlockHost


@dataclass
class Source:
    document: BeautifulSoup
    url: str = ""
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class ParseContext:
    document: BeautifulSoup
    host: "BlockHost"
    url: str = ""
    params: dict[str, Any] = field(default_factory=dict)
