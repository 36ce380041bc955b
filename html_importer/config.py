"""
Runtime settings read from environment variables.

CLI entry points call load_dotenv() first, so a local .env file works too.
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    """Importer settings."""
    model_config = ConfigDict(frozen=True)

    log_level: str = "INFO"
    log_file: Optional[str] = None
    rules_dir: str = "import_rules"      # RuleStore directory
    html_parser: str = "html5lib"        # BeautifulSoup tree builder

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("IMPORTER_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("IMPORTER_LOG_FILE") or None,
            rules_dir=os.getenv("IMPORTER_RULES_DIR", "import_rules"),
            html_parser=os.getenv("IMPORTER_HTML_PARSER", "html5lib"),
        )

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO
