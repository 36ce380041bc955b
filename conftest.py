"""Shared fixtures for the HTML Importer tests."""

import pytest

from html_importer.host import DefaultBlockHost
from html_importer.sanitizer import parse_document


class RecordingHost(DefaultBlockHost):
    """DefaultBlockHost that remembers every create_block call."""

    def __init__(self, produce_blocks: bool = True):
        super().__init__()
        self.produce_blocks = produce_blocks
        self.created = []

    def create_block(self, document, name, variants=None, cells=None):
        self.created.append({"name": name, "variants": variants, "cells": cells})
        if not self.produce_blocks:
            return None
        return super().create_block(document, name, variants=variants, cells=cells)


@pytest.fixture
def host():
    return DefaultBlockHost()


@pytest.fixture
def recording_host():
    return RecordingHost()


@pytest.fixture
def make_document():
    """Parse markup into a live document."""
    return parse_document


CARD_HTML = (
    '<main><div class="card">'
    '<h1>Title</h1>'
    '<p class="lead">Lead <b>bold</b></p>'
    '<img src="a.jpg" alt="Alt">'
    '<span class="price">Price: $10 | USD</span>'
    '<ul><li>One</li><li>Two</li></ul>'
    '<dl><dt>Author</dt><dd>Jane</dd></dl>'
    '<p class="multi">first<br>second</p>'
    '<meta itemprop="sku" content="meta value">'
    '</div></main>'
)


@pytest.fixture
def card():
    """The .card element of a small product card document."""
    return parse_document(CARD_HTML).select_one(".card")
