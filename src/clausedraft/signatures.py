"""Duplicate signature-section cleanup for model-generated contracts.

Chat models asked for "a contract with signature blocks" regularly emit the
signature section two or three times. This module locates signature sections
with a fixed, ordered set of introducing patterns and keeps only the first.

A signature section starts at a signature-introducing match and runs to the
next markdown heading (``#`` to ``###``) or end of text. A match that falls
inside an already-open section does not start a new one, so the common
``## Signatures`` heading followed by ``IN WITNESS WHEREOF`` boilerplate counts
as a single section.

When two or more sections are found the text is cut at the first section,
which is always kept whole. Lines after it are accumulated only until both
parties' signature lines have been seen and at least ``MIN_BLOCK_LINES`` lines
are collected (or the second section begins). A party that never appeared gets
a synthesized blank block so the rendered contract always offers both parties
a place to sign.

The party detection is keyword-based. Text between the first section and a
later block is kept until both parties are seen.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from clausedraft.render_types import SignatureSection

log = logging.getLogger(__name__)

MIN_BLOCK_LINES = 10

# Ordered: earlier patterns win ties at the same offset.
_SIGNATURE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^##[ \t]+Signatures?\b", re.IGNORECASE | re.MULTILINE),
    re.compile(r"IN WITNESS WHEREOF", re.IGNORECASE),
    re.compile(r"The parties have executed this Agreement", re.IGNORECASE),
    re.compile(r"AGREED AND ACCEPTED:", re.IGNORECASE),
)

_HEADING_LINE_RE = re.compile(r"^#{1,3} ", re.MULTILINE)

_SIGNATURE_FIELD_RE = re.compile(r"\b(?:name|sign\w*)\b", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class _Party:
    key: str
    heading: str
    pattern: re.Pattern[str]


_PARTIES: tuple[_Party, ...] = (
    _Party(
        key="client",
        heading="Client",
        pattern=re.compile(r"\b(?:client|customer)s?\b", re.IGNORECASE),
    ),
    _Party(
        key="contractor",
        heading="Freelancer/Contractor",
        pattern=re.compile(r"\b(?:contractor|freelancer|provider)s?\b", re.IGNORECASE),
    ),
)

_SYNTHESIZED_BLOCK = (
    "\n"
    "**{heading}:**\n"
    "\n"
    "________________________\n"
    "Name: ____________________\n"
    "Title: ____________________\n"
    "Date: ____________________\n"
)


def _section_end(text: str, start: int) -> int:
    """Offset of the first heading after the line containing *start*."""
    line_end = text.find("\n", start)
    if line_end < 0:
        return len(text)
    m = _HEADING_LINE_RE.search(text, line_end + 1)
    return m.start() if m else len(text)


def find_signature_sections(text: str) -> list[SignatureSection]:
    """Locate signature sections in *text*, in offset order."""
    if not text:
        return []

    hits: list[tuple[int, int, str]] = []
    for order, pattern in enumerate(_SIGNATURE_PATTERNS):
        for m in pattern.finditer(text):
            hits.append((m.start(), order, m.group(0)))
    hits.sort()

    sections: list[SignatureSection] = []
    for start, _order, trigger in hits:
        if sections and start < sections[-1].end:
            continue
        sections.append(SignatureSection(
            start=start,
            end=_section_end(text, start),
            trigger=trigger,
        ))
    return sections


def detect_parties(line: str) -> set[str]:
    """Return the party keys whose signature field appears on *line*."""
    if not _SIGNATURE_FIELD_RE.search(line):
        return set()
    return {party.key for party in _PARTIES if party.pattern.search(line)}


def _collect_signature_block(
    text: str, first: SignatureSection, limit: int,
) -> tuple[list[str], set[str]]:
    """Lines of the first section, then trailing lines up to *limit*.

    The first section is always kept whole. Past its end, lines are added
    only until both parties are seen and ``MIN_BLOCK_LINES`` are collected.
    """
    collected: list[str] = []
    seen: set[str] = set()
    offset = first.start
    for line in text[first.start:limit].splitlines(keepends=True):
        if (
            offset >= first.end
            and len(seen) == len(_PARTIES)
            and len(collected) >= MIN_BLOCK_LINES
        ):
            break
        collected.append(line)
        seen |= detect_parties(line)
        offset += len(line)
    return collected, seen


def synthesize_signature_block(party_key: str) -> str:
    """Minimal blank signature block for one party."""
    for party in _PARTIES:
        if party.key == party_key:
            return _SYNTHESIZED_BLOCK.format(heading=party.heading)
    raise ValueError(f"unknown party: {party_key!r}")


def dedupe_signature_sections(text: str) -> str:
    """Keep at most one signature section in *text*.

    Input with zero or one signature section is returned unchanged. Otherwise
    the text before the first section is kept verbatim and followed by the
    first section whole, plus any trailing lines kept before the second.
    """
    sections = find_signature_sections(text)
    if len(sections) < 2:
        return text

    first, second = sections[0], sections[1]
    before = text[:first.start]
    collected, seen = _collect_signature_block(text, first, second.start)

    block = "".join(collected)
    missing = [party.key for party in _PARTIES if party.key not in seen]
    if missing:
        if not block.endswith("\n"):
            block += "\n"
        block += "".join(synthesize_signature_block(key) for key in missing)

    log.info(
        "Signature cleanup: %d sections found, kept %d lines, synthesized %s",
        len(sections),
        len(collected),
        ",".join(missing) or "none",
    )
    return before + block
