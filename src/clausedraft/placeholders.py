"""``{{key}}`` placeholder filling for stored contract templates."""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from clausedraft.drafting_types import Clause, ClauseSuggestion, ContractTemplate, DraftedDocument

log = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def unfilled_placeholders(content: str) -> list[str]:
    """Keys of ``{{key}}`` tokens still present in *content*, in order, deduplicated."""
    seen: dict[str, None] = {}
    for m in _PLACEHOLDER_RE.finditer(content):
        seen.setdefault(m.group(1), None)
    return list(seen)


def fill_template(
    template: ContractTemplate,
    user_clauses: Sequence[Clause],
    ai_suggestions: Sequence[ClauseSuggestion] = (),
    *,
    language: str = "English",
) -> DraftedDocument:
    """Replace each declared placeholder with the clause whose title equals its key.

    User clauses take precedence over accepted (``used``) AI suggestions with
    the same title; unaccepted suggestions are ignored. Placeholders without a
    matching clause are left as-is.
    """
    pool: list[Clause | ClauseSuggestion] = [
        *user_clauses,
        *(s for s in ai_suggestions if s.used),
    ]
    content = template.content
    for placeholder in template.placeholders:
        clause = next((c for c in pool if c.title == placeholder.key), None)
        if clause is None:
            continue
        content = content.replace("{{" + placeholder.key + "}}", clause.content)

    remaining = unfilled_placeholders(content)
    if remaining:
        log.debug("Template %s has unfilled placeholders: %s", template.template_id, remaining)

    return DraftedDocument(
        document_content=content,
        document_type=template.document_type,
        language=language,
    )
