#!/usr/bin/env python3
"""
Command-line script to manage stored import rule documents.

Usage:
    python run_rules.py list
    python run_rules.py show example.com
    python run_rules.py init example.com --root "#content"
    python run_rules.py add-block example.com hero ".hero" --cells '[["h1::text", "p::text"]]'
    python run_rules.py add-cleanup example.com ".cookie-banner" --phase end
    python run_rules.py set-root example.com main
    python run_rules.py delete example.com
"""

import argparse
import json
import sys

from dotenv import load_dotenv
load_dotenv()

from pydantic import ValidationError

from html_importer.config import Settings
from html_importer.logger import setup_logger
from html_importer.rule_store import RuleStore
from html_importer.rules import ImportRuleBuilder


def _builder(store: RuleStore, site: str) -> ImportRuleBuilder:
    rules = store.get(site)
    if rules is None:
        print(f"✗ No rules stored for site '{site}' (run init first)", file=sys.stderr)
        sys.exit(1)
    return ImportRuleBuilder(rules)


def main():
    parser = argparse.ArgumentParser(description="Manage stored import rules")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List stored rule documents")

    show = commands.add_parser("show", help="Print a rule document")
    show.add_argument("site")

    init = commands.add_parser("init", help="Create a rule document")
    init.add_argument("site")
    init.add_argument("--root", default="main", help="Root selector (default: main)")

    add_block = commands.add_parser("add-block", help="Add or merge a block rule")
    add_block.add_argument("site")
    add_block.add_argument("type", help="Block type, e.g. hero")
    add_block.add_argument("selectors", nargs="*", help="Candidate element selectors")
    add_block.add_argument("--variant", action="append", default=[], help="Block variant (repeatable)")
    add_block.add_argument("--parse", help="Parse strategy name (block, carousel, columns, metadata)")
    add_block.add_argument("--cells", help="JSON value for params.cells")
    add_block.add_argument("--insert-mode", choices=["replace", "append", "prepend"],
                           help="Where the block goes (default: replace the candidate)")

    add_cleanup = commands.add_parser("add-cleanup", help="Add cleanup selectors")
    add_cleanup.add_argument("site")
    add_cleanup.add_argument("selectors", nargs="+")
    add_cleanup.add_argument("--phase", choices=["start", "end"], default="start")

    set_root = commands.add_parser("set-root", help="Set the root selector")
    set_root.add_argument("site")
    set_root.add_argument("selector")

    delete = commands.add_parser("delete", help="Delete a rule document")
    delete.add_argument("site")

    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logger(level=settings.log_level_value, log_file=settings.log_file)
    store = RuleStore(settings.rules_dir)

    if args.command == "list":
        print(json.dumps(store.list_stored(), indent=2))
        return

    if args.command == "show":
        rules = store.get(args.site)
        if rules is None:
            print(f"✗ No rules stored for site '{args.site}'", file=sys.stderr)
            sys.exit(1)
        print(json.dumps(rules.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return

    if args.command == "delete":
        if not store.delete(args.site):
            print(f"✗ No rules stored for site '{args.site}'", file=sys.stderr)
            sys.exit(1)
        print(f"✓ Deleted rules for {args.site}", file=sys.stderr)
        return

    if args.command == "init":
        builder = ImportRuleBuilder().set_root(args.root)
    else:
        builder = _builder(store, args.site)

    try:
        if args.command == "add-block":
            # Options left out keep the values of an existing rule of this type
            rule = {"type": args.type, "selectors": args.selectors, "variants": args.variant}
            if args.parse:
                rule["parse"] = args.parse
            if args.cells:
                rule["params"] = {"cells": json.loads(args.cells)}
            if args.insert_mode:
                rule["insert_mode"] = args.insert_mode
            builder.add_block(rule)
        elif args.command == "add-cleanup":
            builder.add_cleanup(args.selectors, phase=args.phase)
        elif args.command == "set-root":
            builder.set_root(args.selector)
    except (ValidationError, ValueError) as e:
        print(f"✗ Invalid rule: {e}", file=sys.stderr)
        sys.exit(1)

    store.put(args.site, builder.build())
    print(f"✓ Saved rules for {args.site}", file=sys.stderr)


if __name__ == "__main__":
    main()
