"""
Main orchestrator for the HTML Importer framework.

Loads the page into a live document, binds the rule document to the host via
TransformFactory, and runs the transformation.
"""

from pathlib import Path
from typing import Optional, Union

from .config import Settings
from .context import Source
from .factory import TransformationResult, TransformFactory
from .host import BlockHost, DefaultBlockHost
from .logger import get_module_logger, setup_logger
from .sanitizer import detect_charset_from_bytes, parse_document
from .schemas import ImportRules

logger = get_module_logger("main")


class HTMLImporter:
    """
    Main orchestrator for importing HTML pages.

    1. Parse the page into a live document
    2. Run the rule-driven transformation
    3. Return the transformed root and its output path
    """

    def __init__(
        self,
        host: Optional[BlockHost] = None,
        settings: Optional[Settings] = None,
        log_level: int = None
    ):
        self.settings = settings or Settings.from_env()
        if log_level is not None:
            setup_logger(level=log_level)

        self.host = host or DefaultBlockHost()
        logger.info("HTMLImporter initialized")

    def transform(
        self,
        html: str,
        rules: ImportRules,
        url: str = "",
        params: Optional[dict] = None
    ) -> list[TransformationResult]:
        """
        Transform one HTML page.

        Args:
            html: Page markup
            rules: Rule document to apply
            url: Page URL (drives the output path)
            params: Ambient params merged under each block rule's params

        Returns:
            One TransformationResult (root element and output path)
        """
        document = parse_document(html, parser=self.settings.html_parser)
        source = Source(document=document, url=url, params=params or {})
        results = TransformFactory.create(rules, host=self.host).transform(source)
        logger.info(f"Complete: {', '.join(r.path for r in results)}")
        return results

    def transform_file(
        self,
        file_path: Union[str, Path],
        rules: ImportRules,
        url: Optional[str] = None,
        params: Optional[dict] = None
    ) -> list[TransformationResult]:
        """Transform an HTML file, decoding it with its declared charset."""
        file_path = Path(file_path)
        raw_bytes = file_path.read_bytes()
        declared_charset = detect_charset_from_bytes(raw_bytes)
        html = raw_bytes.decode(declared_charset, errors='replace')

        return self.transform(html, rules, url=url or file_path.resolve().as_uri(), params=params)


def transform_html(html: str, rules: ImportRules, url: str = "") -> list[TransformationResult]:
    """Convenience function to transform HTML with the default host."""
    return HTMLImporter().transform(html, rules, url=url)
