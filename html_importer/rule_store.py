"""
File-based store for rule documents.

One JSON file per migration site, so a site's rules can be reviewed, edited
by hand and reused across runs.  Parse strategies are stored by registered
name.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .exceptions import RuleDocumentError
from .logger import get_module_logger
from .schemas import ImportRules

logger = get_module_logger("rule_store")


def load_rules(path: Union[str, Path]) -> ImportRules:
    """
    Read one rule document (a bare ImportRules JSON object or a stored entry).

    Raises:
        RuleDocumentError: file missing, not JSON, or not a valid rule document
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise RuleDocumentError(f"Cannot read rule document: {e}", source=str(path))

    # Stored entries wrap the document
    if isinstance(data, dict) and "rules" in data and "site" in data:
        data = data["rules"]
    try:
        return ImportRules.model_validate(data)
    except ValidationError as e:
        raise RuleDocumentError(
            f"Invalid rule document: {e.error_count()} errors",
            source=str(path),
            details={"errors": e.errors(include_url=False, include_context=False)}
        )


def dump_rules(rules: ImportRules, path: Union[str, Path]) -> None:
    """Write one rule document as JSON."""
    Path(path).write_text(
        json.dumps(rules.model_dump(mode="json"), indent=2, ensure_ascii=False),
        encoding="utf-8"
    )


class RuleStore:
    """
    File-based store of ImportRules keyed by site name.

    Files are named after a filesystem-safe version of the site name.
    """

    def __init__(self, store_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            store_dir: Directory holding the rule files.
                       Defaults to ./import_rules/
        """
        if store_dir is None:
            store_dir = Path.cwd() / "import_rules"

        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Rule store initialized at: {self.store_dir}")

    @staticmethod
    def _key(site: str) -> str:
        return "".join(c if c.isalnum() or c in '-_.' else '_' for c in site)

    def _file(self, site: str) -> Path:
        return self.store_dir / f"{self._key(site)}.json"

    def get(self, site: str) -> Optional[ImportRules]:
        """Stored rules for `site`, or None (also for unreadable files)."""
        rule_file = self._file(site)
        if not rule_file.exists():
            logger.debug(f"No stored rules for: {site}")
            return None

        try:
            rules = load_rules(rule_file)
        except RuleDocumentError as e:
            logger.warning(f"Failed to load stored rules for {site}: {e.message}")
            return None
        logger.info(f"Loaded rules for: {site}")
        return rules

    def put(self, site: str, rules: ImportRules, extra_info: Optional[dict] = None) -> str:
        """Store `rules` for `site`; returns the key used."""
        key = self._key(site)
        entry = {
            "key": key,
            "site": site,
            "updated_at": datetime.now().isoformat(),
            "rules": rules.model_dump(mode="json"),
            "extra_info": extra_info or {}
        }
        rule_file = self._file(site)
        rule_file.write_text(json.dumps(entry, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Stored rules for {site} -> {rule_file}")
        return key

    def exists(self, site: str) -> bool:
        return self._file(site).exists()

    def delete(self, site: str) -> bool:
        rule_file = self._file(site)
        if rule_file.exists():
            rule_file.unlink()
            logger.info(f"Deleted rules for: {site}")
            return True
        return False

    def clear(self) -> int:
        """Delete every stored document. Returns count of deleted files."""
        count = 0
        for rule_file in self.store_dir.glob("*.json"):
            rule_file.unlink()
            count += 1
        logger.info(f"Cleared {count} rule documents")
        return count

    def list_stored(self) -> list[dict]:
        """Summary of every stored document, sorted by file name."""
        entries = []
        for rule_file in sorted(self.store_dir.glob("*.json")):
            try:
                data = json.loads(rule_file.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable rule file {rule_file.name}: {e}")
                continue
            entries.append({
                "key": data.get("key"),
                "site": data.get("site"),
                "updated_at": data.get("updated_at"),
                "blocks": [block.get("type") for block in data.get("rules", {}).get("blocks", [])],
                "file": str(rule_file)
            })
        return entries


_default_store: Optional[RuleStore] = None


def get_default_store() -> RuleStore:
    """Get or create the default store instance."""
    global _default_store
    if _default_store is None:
        _default_store = RuleStore()
    return _default_store
