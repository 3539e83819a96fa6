"""Drafting operations: risk analysis, clause suggestions, contract generation.

Each operation takes an optional ``TextGenerator``. With ``None`` (no API key
configured) it returns deterministic offline output instead, so the service
and UI stay usable in development:

- risk analysis uses keyword rules per clause title, with the risk level
  derived from a SHA-256 of the title;
- suggestions come from a fixed catalogue per document type;
- contract generation renders a small markdown contract built from the
  clauses through the same ``render_contract`` path as model output.
"""
from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence
from typing import Any

import orjson

from clausedraft.drafting_types import (
    RISK_LEVELS,
    Clause,
    ClauseRisk,
    ClauseSuggestion,
    RiskLevel,
)
from clausedraft.errors import MissingFieldsError, ResponseParseError
from clausedraft.generator import TextGenerator
from clausedraft.io_utils import extract_rows, loads_json
from clausedraft.markdown_render import render_contract
from clausedraft.prompts import (
    CONTRACT_SYSTEM,
    RISK_ANALYSIS_SYSTEM,
    SIGNATURE_BLOCK_EXAMPLE,
    SUGGESTION_SYSTEM,
    build_contract_prompt,
    build_risk_prompt,
    build_suggestion_prompt,
)

log = logging.getLogger(__name__)

_RISK_ROW_KEYS = ("analysis", "riskAnalysis", "clauses", "risks", "results")
_SUGGESTION_ROW_KEYS = ("suggestions", "clauses", "results")


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def parse_json_response(raw: str, *, what: str) -> Any:
    """Parse a JSON-mode model response; *what* names it in the error."""
    try:
        return loads_json(raw)
    except orjson.JSONDecodeError as exc:
        log.warning("Could not parse %s response as JSON: %s", what, raw[:120])
        raise ResponseParseError(f"Error processing {what} results") from exc


def _string_list(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, list):
        return tuple(str(v).strip() for v in value if str(v).strip())
    return ()


def _risk_level(value: Any) -> RiskLevel:
    level = str(value or "").strip().lower()
    for known in RISK_LEVELS:
        if level == known:
            return known
    # Unrecognized levels are treated as the most severe.
    return "high"


def normalize_risk_rows(payload: Any, clause_count: int) -> list[ClauseRisk]:
    """Convert a model's risk payload into ``ClauseRisk`` records.

    Rows without a usable ``clauseIndex`` take their position in the
    payload. Rows addressing a clause that does not exist are dropped.
    """
    out: list[ClauseRisk] = []
    for pos, row in enumerate(extract_rows(payload, _RISK_ROW_KEYS)):
        raw_index = row.get("clauseIndex", row.get("clause_index", pos))
        try:
            index = int(raw_index)
        except (TypeError, ValueError):
            index = pos
        if not 0 <= index < clause_count:
            log.debug("Dropping risk row for clause index %s (have %d clauses)", raw_index, clause_count)
            continue
        out.append(ClauseRisk(
            clause_index=index,
            risk_level=_risk_level(row.get("riskLevel", row.get("risk_level"))),
            risks=_string_list(row.get("risks")),
            suggestions=_string_list(row.get("suggestions")),
        ))
    return out


def normalize_suggestion_rows(payload: Any) -> list[ClauseSuggestion]:
    """Convert a model's suggestion payload; untitled rows are dropped."""
    suggestions = [
        ClauseSuggestion.from_dict(row)
        for row in extract_rows(payload, _SUGGESTION_ROW_KEYS)
    ]
    return [s for s in suggestions if s.title]


# ---------------------------------------------------------------------------
# Offline fallbacks
# ---------------------------------------------------------------------------

_RISK_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "confidential",
        (
            "No definition of what constitutes confidential information",
            "No exceptions for publicly available information",
        ),
        (
            "Clearly define what specific information is considered confidential",
            "Add exceptions for information that becomes publicly available through "
            "no fault of the receiving party",
        ),
    ),
    (
        "payment",
        (
            "No specific payment terms or methods defined",
            "No consequences for late payment beyond fees",
        ),
        (
            "Specify acceptable payment methods and detailed terms",
            "Include right to suspend services if payment is significantly delayed",
        ),
    ),
    (
        "termination",
        (
            "No notice period for termination specified",
            "No provisions for handling ongoing obligations after termination",
        ),
        (
            "Add clear notice period requirements for termination",
            "Specify which obligations survive termination of the agreement",
        ),
    ),
)

_GENERIC_RISKS = (
    "Vague or ambiguous language could lead to different interpretations",
    "Missing specific details that could be important in a dispute",
)
_GENERIC_SUGGESTIONS = (
    "Use more specific and precise language to avoid ambiguity",
    "Include more detailed provisions to cover potential edge cases",
)


def _mock_risk_level(title: str) -> RiskLevel:
    digest = hashlib.sha256(title.encode("utf-8")).digest()
    return RISK_LEVELS[digest[0] % len(RISK_LEVELS)]


def mock_risk_analysis(clauses: Sequence[Clause]) -> list[ClauseRisk]:
    """Keyword-rule risk analysis used when no generator is configured."""
    out: list[ClauseRisk] = []
    for idx, clause in enumerate(clauses):
        title_lower = clause.title.lower()
        risks, suggestions = _GENERIC_RISKS, _GENERIC_SUGGESTIONS
        for keyword, rule_risks, rule_suggestions in _RISK_RULES:
            if keyword in title_lower:
                risks, suggestions = rule_risks, rule_suggestions
                break
        out.append(ClauseRisk(
            clause_index=idx,
            risk_level=_mock_risk_level(clause.title),
            risks=risks,
            suggestions=suggestions,
        ))
    return out


_MOCK_SUGGESTIONS: dict[str, tuple[ClauseSuggestion, ...]] = {
    "NDA": (
        ClauseSuggestion(
            title="Confidentiality Clause",
            content=(
                "Both parties agree to maintain strict confidentiality of all information "
                "shared during the course of this agreement. Confidential Information includes "
                "but is not limited to business plans, financial data, customer lists, and "
                "technical specifications."
            ),
        ),
        ClauseSuggestion(
            title="Term of Confidentiality",
            content=(
                "The confidentiality obligations under this agreement shall remain in effect "
                "for a period of five (5) years from the Effective Date, regardless of whether "
                "this Agreement is terminated earlier."
            ),
        ),
    ),
    "Lease Agreement": (
        ClauseSuggestion(
            title="Maintenance Responsibility",
            content=(
                "Tenant shall be responsible for routine maintenance and minor repairs. "
                "Landlord shall be responsible for major repairs and structural maintenance "
                "of the property."
            ),
        ),
        ClauseSuggestion(
            title="Late Payment Clause",
            content=(
                "If rent is not received by the 5th day of the month, Tenant agrees to pay a "
                "late fee of $50, plus $10 for each additional day until full payment is "
                "received."
            ),
        ),
    ),
    "Employment Contract": (
        ClauseSuggestion(
            title="Non-Compete Clause",
            content=(
                "For a period of one (1) year after termination of employment, Employee shall "
                "not engage in any business activity that directly competes with Employer "
                "within a 50-mile radius of Employer's principal place of business."
            ),
        ),
        ClauseSuggestion(
            title="Intellectual Property Rights",
            content=(
                "Any inventions, designs, improvements, or intellectual property created by "
                "Employee during the course of employment shall be the sole property of "
                "Employer."
            ),
        ),
    ),
}

_DEFAULT_MOCK_SUGGESTIONS: tuple[ClauseSuggestion, ...] = (
    ClauseSuggestion(
        title="General Indemnification",
        content=(
            "Each party agrees to indemnify and hold harmless the other party from any "
            "claims, damages, or liabilities arising from the indemnifying party's breach "
            "of this Agreement."
        ),
    ),
)


def mock_suggestions(document_type: str) -> list[ClauseSuggestion]:
    """Catalogue suggestions used when no generator is configured."""
    return list(_MOCK_SUGGESTIONS.get(document_type, _DEFAULT_MOCK_SUGGESTIONS))


def mock_contract_markdown(clauses: Sequence[str]) -> str:
    """Small markdown contract listing the clauses, with one signature section."""
    body = "\n".join(f"{idx}. {clause.strip()}" for idx, clause in enumerate(clauses, start=1))
    return (
        "# Mock Contract\n"
        "\n"
        "This is a mock contract for testing purposes. In production, this would contain "
        "real AI-generated content based on your clauses.\n"
        "\n"
        "## Clauses\n"
        "\n"
        f"{body}\n"
        "\n"
        f"{SIGNATURE_BLOCK_EXAMPLE}\n"
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def analyze_risks(
    clauses: Sequence[Clause],
    generator: TextGenerator | None,
) -> list[ClauseRisk]:
    """Assess legal, business and compliance risk for each clause."""
    if not clauses:
        raise MissingFieldsError("Missing required fields: clauses are required")
    if generator is None:
        return mock_risk_analysis(clauses)

    raw = generator.generate(
        system=RISK_ANALYSIS_SYSTEM,
        prompt=build_risk_prompt(list(clauses)),
        json_mode=True,
    )
    payload = parse_json_response(raw, what="risk analysis")
    return normalize_risk_rows(payload, len(clauses))


def suggest_clauses(
    document_type: str,
    user_clauses: Sequence[Clause],
    generator: TextGenerator | None,
    *,
    language: str = "English",
) -> list[ClauseSuggestion]:
    """Propose additional clauses that complement *user_clauses*."""
    if not document_type or not user_clauses:
        raise MissingFieldsError(
            "Missing required fields: documentType and userClauses are required"
        )
    if generator is None:
        return mock_suggestions(document_type)

    raw = generator.generate(
        system=SUGGESTION_SYSTEM,
        prompt=build_suggestion_prompt(document_type, list(user_clauses), language),
        json_mode=True,
    )
    payload = parse_json_response(raw, what="AI suggestions")
    return normalize_suggestion_rows(payload)


def generate_contract(
    clauses: Sequence[str],
    generator: TextGenerator | None,
) -> str:
    """Draft a full contract from clause texts and render it to HTML."""
    cleaned = [c for c in clauses if c and c.strip()]
    if not cleaned:
        raise MissingFieldsError("Missing required fields: clauses are required")
    if generator is None:
        return render_contract(mock_contract_markdown(cleaned))

    markdown = generator.generate(
        system=CONTRACT_SYSTEM,
        prompt=build_contract_prompt(cleaned),
    )
    log.debug("Generated contract markdown: %d chars from %s", len(markdown), generator.model_version())
    return render_contract(markdown)
