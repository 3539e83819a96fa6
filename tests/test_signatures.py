"""Tests for clausedraft.signatures: duplicate signature-section cleanup."""
from __future__ import annotations

import pytest

from clausedraft.prompts import SIGNATURE_BLOCK_EXAMPLE
from clausedraft.render_types import SignatureSection
from clausedraft.signatures import (
    MIN_BLOCK_LINES,
    dedupe_signature_sections,
    detect_parties,
    find_signature_sections,
    synthesize_signature_block,
)

PREFIX = "# Service Agreement\n\n1. Scope of work.\n2. Payment terms.\n\n"

SIG_BLOCK = (
    "## Signatures\n"
    "\n"
    "**Client:**\n"
    "Name: [Client Name]\n"
    "**Contractor:**\n"
    "Name: [Contractor Name]\n"
    "\n"
)

SINGLE = (
    "# Agreement\n"
    "\n"
    "Terms apply.\n"
    "\n"
    "## Signatures\n"
    "\n"
    "IN WITNESS WHEREOF, the Parties have executed this Agreement as of the date "
    "first written above.\n"
    "\n"
    "**Client:**\n"
    "\n"
    "________________________\n"
    "Name: [Client Name]\n"
    "\n"
    "**Freelancer/Contractor:**\n"
    "\n"
    "________________________\n"
    "Name: [Freelancer Name]\n"
)


class TestFindSignatureSections:
    def test_empty_text(self) -> None:
        assert find_signature_sections("") == []

    def test_no_signature_text(self) -> None:
        assert find_signature_sections("# Agreement\n\nJust terms.\n") == []

    def test_heading_and_boilerplate_are_one_section(self) -> None:
        sections = find_signature_sections(SINGLE)
        assert len(sections) == 1
        assert sections[0].trigger == "## Signatures"
        assert sections[0].start == SINGLE.index("## Signatures")
        assert sections[0].end == len(SINGLE)

    def test_section_ends_at_next_heading(self) -> None:
        text = PREFIX + SIG_BLOCK + "## Exhibit A\n\nDetails.\n"
        sections = find_signature_sections(text)
        assert len(sections) == 1
        assert text[sections[0].start:sections[0].end] == SIG_BLOCK

    def test_two_headings_are_two_sections(self) -> None:
        text = PREFIX + SIG_BLOCK + SIG_BLOCK
        sections = find_signature_sections(text)
        assert [s.start for s in sections] == [len(PREFIX), len(PREFIX) + len(SIG_BLOCK)]

    def test_case_insensitive_heading(self) -> None:
        sections = find_signature_sections("Intro\n## signature\nName: x\n")
        assert len(sections) == 1
        assert sections[0].trigger == "## signature"

    def test_agreed_and_accepted_trigger(self) -> None:
        text = "Terms.\n\nAGREED AND ACCEPTED:\nClient Name: ____\n"
        sections = find_signature_sections(text)
        assert len(sections) == 1
        assert sections[0].trigger == "AGREED AND ACCEPTED:"

    def test_heading_not_at_line_start_ignored(self) -> None:
        assert find_signature_sections("See the ## Signatures part.\n") == []


class TestSignatureSection:
    def test_negative_start_raises(self) -> None:
        with pytest.raises(ValueError):
            SignatureSection(start=-1, end=4, trigger="x")

    def test_end_before_start_raises(self) -> None:
        with pytest.raises(ValueError):
            SignatureSection(start=5, end=4, trigger="x")


class TestDetectParties:
    def test_client_name_line(self) -> None:
        assert detect_parties("Name: [Client Name]") == {"client"}

    def test_label_without_field_token(self) -> None:
        assert detect_parties("**Client:**") == set()

    def test_provider_signature(self) -> None:
        assert detect_parties("Provider signature: ________") == {"contractor"}

    def test_both_parties(self) -> None:
        assert detect_parties("Customer and Provider sign below") == {"client", "contractor"}

    def test_field_without_party(self) -> None:
        assert detect_parties("Name: ____") == set()


class TestDedupeSignatureSections:
    def test_no_sections_unchanged(self) -> None:
        text = "# Agreement\n\nNo signatures here.\n"
        assert dedupe_signature_sections(text) == text

    def test_single_section_unchanged(self) -> None:
        assert dedupe_signature_sections(SINGLE) == SINGLE

    def test_single_section_missing_party_unchanged(self) -> None:
        text = PREFIX + "## Signatures\nName: [Client Name]\n"
        assert dedupe_signature_sections(text) == text

    def test_duplicate_keeps_first_block_only(self) -> None:
        text = PREFIX + SIG_BLOCK + SIG_BLOCK
        result = dedupe_signature_sections(text)
        assert result == PREFIX + SIG_BLOCK
        assert result.count("## Signatures") == 1

    def test_prefix_preserved_verbatim(self) -> None:
        prefix = "Odd   spacing\n\n\n*kept* as-is\n"
        result = dedupe_signature_sections(prefix + SIG_BLOCK + SIG_BLOCK + SIG_BLOCK)
        assert result.startswith(prefix)
        assert result.count("## Signatures") == 1

    def test_missing_contractor_synthesized(self) -> None:
        first = "## Signatures\nName: [Client Name]\n\n"
        second = "## Signatures\nName: [Contractor Name]\n"
        result = dedupe_signature_sections(PREFIX + first + second)
        assert result == PREFIX + first + synthesize_signature_block("contractor")
        assert "[Contractor Name]" not in result
        assert result.count("## Signatures") == 1

    def test_no_party_detected_synthesizes_both(self) -> None:
        text = (
            "Body\n"
            "IN WITNESS WHEREOF one.\n"
            "## Other\n"
            "IN WITNESS WHEREOF two.\n"
        )
        result = dedupe_signature_sections(text)
        assert result == (
            "Body\nIN WITNESS WHEREOF one.\n## Other\n"
            + synthesize_signature_block("client")
            + synthesize_signature_block("contractor")
        )
        assert "two." not in result

    def test_long_first_section_kept_whole(self) -> None:
        lines = ["## Signatures", "Client Name: A", "Contractor Name: B"]
        lines += [f"Witness line {i}" for i in range(10)]
        lines += ["Date: x"]
        first = "\n".join(lines) + "\n"
        second = "## Signatures\nClient Name: C\nContractor Name: D\n"
        result = dedupe_signature_sections(PREFIX + first + second)
        assert result == PREFIX + first
        assert "Client Name: C" not in result

    def test_trailing_text_stops_after_both_parties_and_min_lines(self) -> None:
        first = "## Signatures\nClient Name: A\nContractor Name: B\n"
        exhibit = "## Exhibit A\n" + "".join(f"Exhibit line {i}\n" for i in range(10))
        second = "## Signatures\nClient Name: C\nContractor Name: D\n"
        result = dedupe_signature_sections(PREFIX + first + exhibit + second)
        kept_exhibit = "## Exhibit A\n" + "".join(f"Exhibit line {i}\n" for i in range(6))
        assert result == PREFIX + first + kept_exhibit
        assert len(result[len(PREFIX):].splitlines()) == MIN_BLOCK_LINES
        assert "Exhibit line 6" not in result

    def test_prose_between_party_blocks_is_retained(self) -> None:
        lines = ["## Signatures", "Client Name: A"]
        lines += [f"Unrelated prose {i}" for i in range(12)]
        lines += ["Contractor Name: B", "Date: x"]
        first = "\n".join(lines) + "\n"
        second = "## Signatures\nClient Name: C\nContractor Name: D\n"
        result = dedupe_signature_sections(PREFIX + first + second)
        assert result == PREFIX + first
        assert "Unrelated prose 11" in result
        assert "Client Name: C" not in result

    def test_repeated_prompt_example_keeps_every_field(self) -> None:
        block = SIGNATURE_BLOCK_EXAMPLE + "\n\n"
        head = "# A\n\nTerms.\n\n"
        result = dedupe_signature_sections(head + block + block)
        assert result == head + block
        assert "Title: [Freelancer Title]" in result
        assert result.count("Date: ________________") == 2
        assert "**Client:**\n\n________________________\nName" in result

    def test_crlf_section_kept_verbatim(self) -> None:
        block = SIG_BLOCK.replace("\n", "\r\n")
        result = dedupe_signature_sections(PREFIX + block + block)
        assert result == PREFIX + block


class TestSynthesizeSignatureBlock:
    def test_client_block(self) -> None:
        block = synthesize_signature_block("client")
        assert "**Client:**" in block
        assert "Name: ____" in block
        assert "Title: ____" in block
        assert "Date: ____" in block

    def test_unknown_party_raises(self) -> None:
        with pytest.raises(ValueError, match="unknown party"):
            synthesize_signature_block("witness")
