"""Markdown-to-HTML rendering for model-generated contracts.

Converts the markdown a chat model returns into display-ready HTML for the
contract preview. The conversion is a fixed sequence of stages:

1. ``normalize_line_endings`` and ``strip_artifacts``: LF line endings, then
   remove stray model control tokens.
2. ``normalize_heading_spacing``: isolate headings with blank lines.
3. ``apply_inline_emphasis``: ``**bold**``/``__bold__`` then ``*em*``/``_em_``.
4. ``tokenize_blocks``: one ``Block`` per line.
5. ``render_blocks``: headings, grouped lists, signature fields, text.
6. ``assemble_paragraphs``: blank-line runs become paragraph boundaries,
   single newlines become ``<br>`` (except directly after a heading).
7. ``wrap_document``: single ``contract-document`` container.

Stages 1-3 and 6-7 are plain ``str -> str`` functions; stages 4-5 work on
the line IR from ``render_types``. Every stage is total over strings: input
that matches no rule passes through as literal paragraph text. Output is not
escaped; model output is trusted display HTML.

Markdown markers are only recognized at line start, and rendered lines always
start with ``<``, so rendering already-rendered HTML only re-wraps it.
"""
from __future__ import annotations

import re
from collections.abc import Callable

from clausedraft.render_types import Block, BlockKind, ListState
from clausedraft.signatures import dedupe_signature_sections

# ---------------------------------------------------------------------------
# HTML vocabulary
# ---------------------------------------------------------------------------

DOCUMENT_CLASS = "contract-document"
PARAGRAPH_CLASS = "contract-paragraph"
HEADING_CLASSES: dict[int, str] = {
    1: "contract-section",
    2: "contract-subsection",
    3: "contract-subsubsection",
}
SIGNATURE_LINE_HTML = '<div class="signature-line"></div>'
PARAGRAPH_SEPARATOR = f'</p><p class="{PARAGRAPH_CLASS}">'

SIGNATURE_LABELS: tuple[str, ...] = (
    "Name", "Signature", "Title", "Date", "Client", "Freelancer", "Contractor",
)

_LIST_TAGS: dict[ListState, str] = {"ordered": "ol", "unordered": "ul"}
_LIST_STATE_BY_KIND: dict[BlockKind, ListState] = {
    "ordered_item": "ordered",
    "unordered_item": "unordered",
}

# ---------------------------------------------------------------------------
# Stage 1: line endings and model artifacts
# ---------------------------------------------------------------------------

MODEL_ARTIFACTS: tuple[str, ...] = (
    ".scalablytypedassistant<|endheaderid|>",
    ".scalablytypedassistant<|endheader_id|>",
)


_LINE_ENDING_RE = re.compile(r"\r\n?")


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return _LINE_ENDING_RE.sub("\n", text)


def strip_artifacts(text: str) -> str:
    """Remove known stray control-token strings (exact literal matches)."""
    for artifact in MODEL_ARTIFACTS:
        text = text.replace(artifact, "")
    return text


# ---------------------------------------------------------------------------
# Stage 2: heading spacing
# ---------------------------------------------------------------------------

_HEADING_RE = re.compile(r"^(#{1,3}) (.*)$")


def _is_heading(line: str) -> bool:
    return _HEADING_RE.match(line) is not None


def normalize_heading_spacing(text: str) -> str:
    """Surround ``#``/``##``/``###`` lines with blank lines.

    A blank line is inserted before a heading whose previous line is
    non-blank, and after a heading whose next line is neither blank nor
    another heading.
    """
    lines = text.split("\n")
    out: list[str] = []
    for i, line in enumerate(lines):
        if not _is_heading(line):
            out.append(line)
            continue
        if out and out[-1].strip():
            out.append("")
        out.append(line)
        if i + 1 < len(lines):
            nxt = lines[i + 1]
            if nxt.strip() and not _is_heading(nxt):
                out.append("")
    return "\n".join(out)


# ---------------------------------------------------------------------------
# Stage 3: inline emphasis
# ---------------------------------------------------------------------------

# Underscore forms refuse underscore-only content and intraword positions so
# signature rules like "Date: ________" survive to the block stage.
_BOLD_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*"),
    re.compile(r"(?<!\w)__(?=[^_\s])(.+?)(?<=[^_\s])__(?!\w)"),
)
_ITALIC_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\*(?=[^*\s])([^*\n]+?)(?<=[^*\s])\*"),
    re.compile(r"(?<!\w)_(?=[^_\s])([^_\n]+?)(?<=[^_\s])_(?!\w)"),
)


def apply_inline_emphasis(text: str) -> str:
    """Convert bold then italic markdown emphasis to ``<strong>``/``<em>``."""
    for pattern in _BOLD_PATTERNS:
        text = pattern.sub(r"<strong>\1</strong>", text)
    for pattern in _ITALIC_PATTERNS:
        text = pattern.sub(r"<em>\1</em>", text)
    return text


# ---------------------------------------------------------------------------
# Stage 4: tokenize
# ---------------------------------------------------------------------------

_ORDERED_ITEM_RE = re.compile(r"^\d+\. (.*)$")
_UNORDERED_ITEM_RE = re.compile(r"^- (.*)$")
_SIGNATURE_RULE_RE = re.compile(r"^_{10,}\s*$")
_SIGNATURE_FIELD_RE = re.compile(
    rf"^({'|'.join(SIGNATURE_LABELS)}):\s*_*\s*$",
)
_INLINE_RULE_RE = re.compile(r"_{10,}")


def tokenize_line(line: str) -> Block:
    """Classify a single line."""
    m = _HEADING_RE.match(line)
    if m:
        return Block("heading", text=m.group(2).rstrip(), level=len(m.group(1)))
    m = _ORDERED_ITEM_RE.match(line)
    if m:
        return Block("ordered_item", text=m.group(1))
    m = _UNORDERED_ITEM_RE.match(line)
    if m:
        return Block("unordered_item", text=m.group(1))
    if _SIGNATURE_RULE_RE.match(line):
        return Block("signature_line")
    m = _SIGNATURE_FIELD_RE.match(line)
    if m:
        return Block("signature_field", label=m.group(1))
    if not line.strip():
        return Block("blank", text=line)
    return Block("text", text=line)


def tokenize_blocks(text: str) -> list[Block]:
    """Split *text* into one ``Block`` per line."""
    return [tokenize_line(line) for line in text.split("\n")]


# ---------------------------------------------------------------------------
# Stage 5: render
# ---------------------------------------------------------------------------


def render_block(block: Block) -> str:
    """Render a non-list block to one line of HTML (or literal text)."""
    if block.kind == "heading":
        cls = HEADING_CLASSES[block.level]
        return f'<h{block.level} class="{cls}">{block.text}</h{block.level}>'
    if block.kind == "signature_line":
        return SIGNATURE_LINE_HTML
    if block.kind == "signature_field":
        return f'<div class="signature-field">{block.label}: {SIGNATURE_LINE_HTML}</div>'
    if block.kind == "text":
        return _INLINE_RULE_RE.sub(SIGNATURE_LINE_HTML, block.text)
    # blank
    return ""


def render_blocks(blocks: list[Block]) -> list[str]:
    """Render blocks to HTML lines, grouping consecutive list items.

    A run of same-kind list items renders as one line holding the whole
    ``<ol>``/``<ul>``. Any other block, a blank line or an item of the other
    list kind closes the open list.
    """
    lines: list[str] = []
    state: ListState = "none"
    for block in blocks:
        kind = _LIST_STATE_BY_KIND.get(block.kind, "none")
        if state != "none" and kind != state:
            lines[-1] += f"</{_LIST_TAGS[state]}>"
        if kind == "none":
            lines.append(render_block(block))
        elif kind == state:
            lines[-1] += f"<li>{block.text}</li>"
        else:
            lines.append(f"<{_LIST_TAGS[kind]}><li>{block.text}</li>")
        state = kind
    if state != "none":
        lines[-1] += f"</{_LIST_TAGS[state]}>"
    return lines


# ---------------------------------------------------------------------------
# Stages 6-7: paragraphs and wrapper
# ---------------------------------------------------------------------------

_PARAGRAPH_BREAK_RE = re.compile(r"\n{2,}")
_HEADING_NEWLINE_RE = re.compile(r"(</h[1-3]>)\n")


def assemble_paragraphs(body: str) -> str:
    """Turn newline runs into paragraph boundaries and ``<br>`` breaks."""
    body = _PARAGRAPH_BREAK_RE.sub(PARAGRAPH_SEPARATOR, body)
    body = _HEADING_NEWLINE_RE.sub(r"\1", body)
    return body.replace("\n", "<br>")


def wrap_document(body: str) -> str:
    return f'<div class="{DOCUMENT_CLASS}"><p class="{PARAGRAPH_CLASS}">{body}</p></div>'


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

TEXT_STAGES: tuple[Callable[[str], str], ...] = (
    normalize_line_endings,
    strip_artifacts,
    normalize_heading_spacing,
    apply_inline_emphasis,
)


def markdown_to_html(markdown: str) -> str:
    """Render a cleaned markdown contract body as an HTML fragment."""
    text = markdown or ""
    for stage in TEXT_STAGES:
        text = stage(text)
    lines = render_blocks(tokenize_blocks(text))
    return wrap_document(assemble_paragraphs("\n".join(lines)))


def render_contract(raw_text: str, *, dedupe_signatures: bool = True) -> str:
    """Clean duplicate signature sections, then render to HTML."""
    text = raw_text or ""
    if dedupe_signatures:
        text = dedupe_signature_sections(text)
    return markdown_to_html(text)
