"""Records exchanged between the drafting operations, prompts and HTTP layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, cast


type RiskLevel = Literal["high", "medium", "low"]

RISK_LEVELS: tuple[RiskLevel, ...] = ("low", "medium", "high")


@dataclass(frozen=True, slots=True)
class Clause:
    """A user-supplied contract clause."""

    title: str
    content: str = ""

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> Clause:
        return cls(
            title=str(row.get("title", "") or ""),
            content=str(row.get("content", "") or ""),
        )


@dataclass(frozen=True, slots=True)
class ClauseRisk:
    """Risk assessment for one clause, addressed by its position."""

    clause_index: int
    risk_level: RiskLevel
    risks: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.clause_index < 0:
            raise ValueError(f"clause_index must be >= 0, got {self.clause_index}")
        if self.risk_level not in RISK_LEVELS:
            raise ValueError(f"unknown risk level: {self.risk_level!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "clauseIndex": self.clause_index,
            "riskLevel": self.risk_level,
            "risks": list(self.risks),
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True, slots=True)
class ClauseSuggestion:
    """A clause proposed by the model; ``used`` marks it as accepted."""

    title: str
    content: str
    used: bool = False

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> ClauseSuggestion:
        return cls(
            title=str(row.get("title", "") or ""),
            content=str(row.get("content", "") or ""),
            used=bool(row.get("used", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.content}


@dataclass(frozen=True, slots=True)
class TemplatePlaceholder:
    """A ``{{key}}`` slot in a stored template."""

    key: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class ContractTemplate:
    """A stored document template with ``{{key}}`` placeholders."""

    template_id: str
    name: str
    document_type: str
    content: str
    placeholders: tuple[TemplatePlaceholder, ...] = field(default=())

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> ContractTemplate:
        raw_placeholders = cast(list[Any], row.get("placeholders") or [])
        placeholders: list[TemplatePlaceholder] = []
        for item in raw_placeholders:
            if isinstance(item, str):
                placeholders.append(TemplatePlaceholder(key=item))
            elif isinstance(item, dict) and item.get("key"):
                placeholders.append(TemplatePlaceholder(
                    key=str(item["key"]),
                    description=str(item.get("description", "") or ""),
                ))
        template_id = str(row.get("id") or row.get("_id") or "")
        if not template_id:
            raise ValueError("template row has no id")
        return cls(
            template_id=template_id,
            name=str(row.get("name", "") or ""),
            document_type=str(row.get("documentType", row.get("document_type", "")) or ""),
            content=str(row.get("content", "") or ""),
            placeholders=tuple(placeholders),
        )


@dataclass(frozen=True, slots=True)
class DraftedDocument:
    """A template with its placeholders filled."""

    document_content: str
    document_type: str
    language: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentContent": self.document_content,
            "documentType": self.document_type,
            "language": self.language,
        }
