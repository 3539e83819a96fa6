"""Prompt text for the drafting operations.

Each builder returns the user prompt; the matching ``*_SYSTEM`` constant is the
system message. Risk analysis and suggestions are requested as JSON, contract
generation as markdown that ``markdown_render`` understands (``#``/``##``
headings, ``**bold**`` terms, numbered lists, underscore signature rules).
"""
from __future__ import annotations

from clausedraft.drafting_types import Clause

EMPTY_CLAUSE_CONTENT = "[Empty content - This clause has no content specified]"

RISK_ANALYSIS_SYSTEM = (
    "You are a legal expert specializing in contract risk analysis. Provide "
    "thorough, accurate risk assessments and practical improvement suggestions "
    "for contract clauses."
)

SUGGESTION_SYSTEM = (
    "You are a legal expert specializing in contract drafting. You provide "
    "legally sound, contextually appropriate clause suggestions for various "
    "types of contracts. Your suggestions should be detailed and professionally "
    "written."
)

CONTRACT_SYSTEM = (
    "You are a legal expert specializing in drafting professional contracts. "
    "Your output is meticulously formatted, legally sound, and comprehensive."
)

SIGNATURE_BLOCK_EXAMPLE = """\
## Signatures

IN WITNESS WHEREOF, the Parties have executed this Agreement as of the date first written above.

**Client:**

________________________
Name: [Client Name]
Title: [Client Title]
Date: ________________

**Freelancer/Contractor:**

________________________
Name: [Freelancer Name]
Title: [Freelancer Title]
Date: ________________"""


def build_risk_prompt(clauses: list[Clause]) -> str:
    listing = "\n".join(
        f"CLAUSE {idx + 1}: {clause.title}\n{clause.content or EMPTY_CLAUSE_CONTENT}\n"
        for idx, clause in enumerate(clauses)
    )
    return f"""\
Analyze the following contract clauses for potential legal, business, and compliance risks. For each clause, provide:
1. Risk Level (High, Medium, Low)
2. Risk Description
3. Suggested Improvements

Here are the clauses:

{listing}
Format your response as a JSON object with an "analysis" array where each item contains:
- clauseIndex: The index of the clause (starting from 0)
- riskLevel: "high", "medium", or "low"
- risks: Array of specific risks identified
- suggestions: Array of suggested improvements to mitigate risks

For clauses with empty content, analyze based on the title and suggest appropriate content.

Your analysis should be detailed but concise, focusing on practical improvements."""


def build_suggestion_prompt(document_type: str, clauses: list[Clause], language: str) -> str:
    listing = "\n".join(
        f"{idx + 1}. {clause.title}: {clause.content}" for idx, clause in enumerate(clauses)
    )
    return f"""\
Generate relevant additional clause suggestions for a {document_type} contract based on the following existing clauses.

Existing clauses:
{listing}

Based on these clauses, suggest 3-4 additional clauses that would complement the contract. These should be clauses that are missing but would be important to include for this type of document.

For the {document_type} document type, think about common industry-standard clauses that would make this document more comprehensive and legally sound.

Write the suggestions in {language}.

Output should be formatted as a JSON object with a "suggestions" array, each object containing:
- title: The title of the suggested clause
- content: The detailed clause content

Each suggestion should be specific, legally appropriate, and contextually relevant to the existing clauses."""


def build_contract_prompt(clauses: list[str]) -> str:
    listing = "\n".join(clauses)
    return f"""\
Generate a professional contract based on the following clauses:
{listing}

Please format this as a complete, legally-formatted contract with appropriate sections,
including but not limited to parties involved, terms, conditions, and signature blocks.

Format the output using markdown with the following guidelines:
- Use # for main headings
- Use ## for subheadings
- Use **text** for important terms or definitions
- Use proper paragraph spacing
- Format dates, amounts, and legal references consistently
- Use numbered lists for sequential terms and conditions

For the signature block, please format it like this example:

{SIGNATURE_BLOCK_EXAMPLE}

Do not use any repetitive signature blocks or multiple signature sections."""
