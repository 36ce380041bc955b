#!/usr/bin/env python3
"""
Command-line script to transform HTML files with an import rule document.

Rules come from a JSON file (--rules) or from the rule store (--site, see
run_rules.py).  Each file is transformed and the result printed as JSON.

Usage:
    python run_importer.py page.html --rules rules.json
    python run_importer.py page1.html page2.html --site example.com
    python run_importer.py page.html --site example.com --url https://example.com/news/ -o out.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Load .env file automatically
from dotenv import load_dotenv
load_dotenv()

from html_importer.config import Settings
from html_importer.exceptions import RuleDocumentError
from html_importer.logger import setup_logger
from html_importer.main import HTMLImporter
from html_importer.rule_store import RuleStore, load_rules


def main():
    parser = argparse.ArgumentParser(
        description="Transform HTML files into block documents using import rules"
    )
    parser.add_argument("files", nargs="+", help="HTML files to transform")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--rules", "-r", help="Rule document (JSON)")
    source.add_argument("--site", "-s", help="Site name in the rule store")
    parser.add_argument("--url", "-u", help="Page URL (used for the output path; single file only)")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    settings = Settings.from_env()
    log_level = logging.DEBUG if args.verbose else settings.log_level_value
    setup_logger(level=log_level, log_file=settings.log_file)

    try:
        if args.rules:
            rules = load_rules(args.rules)
        else:
            rules = RuleStore(settings.rules_dir).get(args.site)
            if rules is None:
                print(f"✗ No rules stored for site '{args.site}'", file=sys.stderr)
                sys.exit(1)
    except RuleDocumentError as e:
        print(f"✗ {e.message} ({e.source})", file=sys.stderr)
        sys.exit(1)

    if args.url and len(args.files) > 1:
        parser.error("--url can only be used with a single file")

    importer = HTMLImporter(settings=settings)
    results = []

    for filepath in args.files:
        path = Path(filepath)
        print(f"Transforming: {path.name}", file=sys.stderr)

        try:
            transformed = importer.transform_file(path, rules, url=args.url)
            for result in transformed:
                results.append({
                    "file": path.name,
                    "status": "success",
                    "path": result.path,
                    "html": str(result.element)
                })
                blocks = len(result.element.find_all("table"))
                print(f"  ✓ {result.path} ({blocks} blocks)", file=sys.stderr)

        except Exception as e:
            results.append({
                "file": path.name,
                "status": "error",
                "error": str(e)
            })
            print(f"  ✗ Error: {e}", file=sys.stderr)

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
