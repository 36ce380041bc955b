"""
TransformFactory: binds a rule document to a host and produces, per source
document, the transformed root element together with its output path.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

from bs4 import Tag

from .context import Source
from .host import BlockHost, DefaultBlockHost
from .schemas import ImportRules
from .transformer import Transformer


@dataclass
class TransformationResult:
    element: Tag
    path: str


def generate_document_path(url: str, host: BlockHost) -> str:
    """
    Output path for the document at `url`.

    "https://site/a/My Page.html" -> "/a/my-page"; a trailing "/" maps to
    ".../index".
    """
    path = urlparse(url or "").path or "/"
    if path.endswith("/"):
        path = f"{path}index"
    path = unquote(path).lower()
    path = re.sub(r"\.html$", "", path)
    path = re.sub(r"[^a-z0-9/]", "-", path)
    return host.sanitize_path(path)


class Transformation:
    """A rule document ready to run against source documents."""

    def __init__(self, rules: ImportRules, host: BlockHost):
        self.rules = rules
        self.host = host
        self.transformer = Transformer(host)

    def transform(self, source: Source) -> list[TransformationResult]:
        element = self.transformer.transform(self.rules, source)
        return [TransformationResult(element=element, path=generate_document_path(source.url, self.host))]


class TransformFactory:
    """Factory to create a transformation object using a given set of rules."""

    @staticmethod
    def create(rules: ImportRules, host: Optional[BlockHost] = None) -> Transformation:
        return Transformation(rules, host or DefaultBlockHost())
