"""Line-level intermediate representation for the contract renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


type BlockKind = Literal[
    "heading",
    "ordered_item",
    "unordered_item",
    "signature_line",
    "signature_field",
    "text",
    "blank",
]
type ListState = Literal["none", "ordered", "unordered"]


@dataclass(frozen=True, slots=True)
class Block:
    """One tokenized source line.

    ``text`` holds the line content with its markdown marker removed
    (heading hashes, list numbering, bullet dash). ``level`` is only set for
    headings, ``label`` only for signature fields.
    """

    kind: BlockKind
    text: str = ""
    level: int = 0
    label: str = ""

    def __post_init__(self) -> None:
        if self.kind == "heading" and not 1 <= self.level <= 3:
            raise ValueError(f"heading level must be 1-3, got {self.level}")
        if self.kind == "signature_field" and not self.label:
            raise ValueError("signature_field blocks require a label")

    @property
    def is_list_item(self) -> bool:
        return self.kind in ("ordered_item", "unordered_item")


@dataclass(frozen=True, slots=True)
class SignatureSection:
    """A signature section located in raw text: ``text[start:end]``."""

    start: int
    end: int
    trigger: str  # the matched signature-introducing phrase

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end must be >= start, got {self.end} < {self.start}")
