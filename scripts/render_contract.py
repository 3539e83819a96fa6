#!/usr/bin/env python3
"""Render a markdown contract draft to HTML (or a plain-text preview).

Reads markdown from a file or stdin, removes duplicate signature sections,
converts it with the contract renderer and writes the result to stdout or a
file. Summary messages go to stderr.

Usage:
    python3 scripts/render_contract.py --input drafts/nda.md --format html
    cat drafts/nda.md | python3 scripts/render_contract.py --format json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from clausedraft.html_text import contract_plain_text, read_file
from clausedraft.io_utils import dumps_json
from clausedraft.markdown_render import render_contract
from clausedraft.signatures import find_signature_sections

log = logging.getLogger("render_contract")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a markdown contract draft to HTML."
    )
    parser.add_argument(
        "--input",
        default="-",
        help="Markdown file to render, or '-' for stdin (default: -)",
    )
    parser.add_argument(
        "--format",
        choices=("html", "json", "text"),
        default="html",
        help="html fragment, {\"contract\": html} JSON, or plain-text preview",
    )
    parser.add_argument(
        "--no-dedupe",
        action="store_true",
        help="Keep repeated signature sections",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write to this file instead of stdout",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.input == "-":
        markdown = sys.stdin.read()
    else:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: input not found: {input_path}", file=sys.stderr)
            return 1
        markdown = read_file(input_path)

    sections = find_signature_sections(markdown)
    log.info("Read %d chars, %d signature section(s)", len(markdown), len(sections))

    html = render_contract(markdown, dedupe_signatures=not args.no_dedupe)

    if args.format == "json":
        output = dumps_json({"contract": html}, pretty=True) + b"\n"
    elif args.format == "text":
        output = (contract_plain_text(html) + "\n").encode("utf-8")
    else:
        output = (html + "\n").encode("utf-8")

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(output)
        log.info("Wrote %s", args.output)
    else:
        sys.stdout.buffer.write(output)
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
