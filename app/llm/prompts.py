from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from app.summary.text import Chunk


PARTIAL_WORD_RANGE = "900–1200"
EXECUTIVE_SUMMARY_WORD_RANGE = "200–300"

MERGE_SECTIONS = (
    f"Executive Summary ({EXECUTIVE_SUMMARY_WORD_RANGE} words)",
    "Key Points & Takeaways",
    "Detailed Synthesis (organized by topic or chronology)",
    "Contradictions & Uncertainties",
    "Notable Quotes",
    "Glossary of Terms & Entities",
    "Open Questions / Next Steps",
)


@dataclass(slots=True)
class PartialSummary:
    index: int
    text: str

    @property
    def label(self) -> str:
        return f"### Partial {self.index + 1}"

    def render(self) -> str:
        return f"\n\n{self.label}\n{self.text}"


def _quote_instruction(preserve_quotes: bool) -> str:
    if preserve_quotes:
        return "preserve short quotes verbatim when crucial"
    return "paraphrase quotes"


def build_partial_prompt(chunk: Chunk, *, preserve_quotes: bool = True) -> str:
    prompt = [
        "You are a meticulous long-form summarizer. Summarize the CHUNK below into an analytical, structured brief that preserves nuance.",
        "",
        f"CHUNK INDEX: {chunk.number} of {chunk.total}",
        f"GOAL: Create a rich partial summary ({PARTIAL_WORD_RANGE} words) that will later be merged.",
        "FOCUS: key claims, evidence, timelines, stats/figures, named entities, definitions, contradictions, open questions, and any causal chains.",
        "STYLE: Use markdown with clear section headings and bullets. "
        f"Keep short quotes if they are pivotal ({_quote_instruction(preserve_quotes)}).",
        "",
        "CHUNK:",
        "",
        chunk.content,
    ]
    return "\n".join(prompt)


def build_merge_prompt(
    partials: Sequence[PartialSummary],
    *,
    target_words: int,
    preserve_quotes: bool = True,
) -> str:
    quotes_note = "short verbatim quotes allowed" if preserve_quotes else "paraphrase quotes"
    sections = [
        f"- {section} ({quotes_note})" if section == "Notable Quotes" else f"- {section}"
        for section in MERGE_SECTIONS
    ]
    prompt = [
        "You will now MERGE the partial summaries into a single, coherent DEEP-DIVE SUMMARY.",
        "",
        f"TARGET LENGTH: about {target_words} words (±10%).",
        "READER: smart non-expert who wants detail without fluff.",
        "OUTPUT: Markdown with these top-level sections:",
        *sections,
        "",
        "REQUIREMENTS:",
        "- Integrate facts across parts; avoid repetition.",
        "- Maintain original nuance; don’t invent facts.",
        "- Keep important numbers, names, dates.",
        "- Prefer active voice and clean headings.",
        "",
        "PARTIAL SUMMARIES:",
        "\n".join(partial.render() for partial in partials),
    ]
    return "\n".join(prompt)
