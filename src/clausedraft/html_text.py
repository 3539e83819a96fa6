"""Plain-text previews of rendered contracts and draft file reading.

``contract_plain_text`` turns renderer output back into readable text for
terminals, e-mail bodies and diffing: each contract block lands on its own
line and signature placeholders become underscore rules.

``read_file`` loads markdown drafts for the CLI, including drafts exported
from word processors (BOM-prefixed UTF-8 or CP1252).
"""
from __future__ import annotations

import re
from pathlib import Path

from bs4 import BeautifulSoup

# Tags the renderer emits that start a new line in the preview.
_LINE_TAGS: list[str] = ["p", "div", "br", "li", "h1", "h2", "h3", "ol", "ul"]

SIGNATURE_RULE_TEXT = "_" * 24

_DRAFT_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp1252")

# ZWSP, ZWNJ, ZWJ, word joiner, BOM
_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
_HORIZONTAL_SPACE_RE = re.compile(r"[^\S\n]+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def contract_plain_text(html: str) -> str:
    """Extract a plain-text preview from rendered contract HTML.

    Args:
        html: Output of ``render_contract`` / ``markdown_to_html``.

    Returns:
        Text with one block per line and at most one blank line between
        blocks. Empty string if *html* is empty.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for rule in soup.find_all("div", class_="signature-line"):
        rule.replace_with(SIGNATURE_RULE_TEXT)
    for bullets in soup.find_all("ul"):
        for item in bullets.find_all("li", recursive=False):
            item.insert(0, "- ")
    for ordered in soup.find_all("ol"):
        for idx, item in enumerate(ordered.find_all("li", recursive=False), start=1):
            item.insert(0, f"{idx}. ")
    for tag in soup.find_all(_LINE_TAGS):
        tag.insert_before("\n")

    return _tidy_lines(strip_zero_width(soup.get_text()))


def _tidy_lines(text: str) -> str:
    """Single-space each line, trim it, and keep at most one blank line in a row."""
    lines = [_HORIZONTAL_SPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()


def read_file(fpath: Path) -> str:
    """Read a markdown draft, trying UTF-8 (BOM stripped) then CP1252.

    Bytes neither encoding accepts are replaced. Returns an empty string if
    the file cannot be read.
    """
    try:
        raw = fpath.read_bytes()
    except OSError:
        return ""
    for encoding in _DRAFT_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace")


def strip_zero_width(text: str) -> str:
    """Remove zero-width characters models and word processors leave in drafts."""
    return _ZERO_WIDTH_RE.sub("", text)
