"""
Prompt construction for the notes transform call.

Each option contributes exactly one fragment to the instruction block: the
positive instruction when enabled, an explicit "do NOT" instruction when
disabled. Models tend to perform a transformation unless told not to, so a
missing fragment is not the same as a disabled option. The block ends with the
JSON shape the reply must follow; list fields for disabled options are shown
as empty lists.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, List, Tuple

from app.models.transform import TransformOptions

PREAMBLE = """You are a careful study notes formatter that never invents facts. You analyze and transform student notes based on specific criteria.

STRICT RULES:
- Only apply transformations that are explicitly requested
- Never add information not in the original notes
- Never invent facts or details
- Format output as valid JSON"""

AUTO_FORMAT_ON = """
- Auto-Format: Apply markdown formatting including:
  - Use headers (##, ###) for main topics and subtopics
  - Convert lists to bullet points or numbered lists where appropriate
  - Add emphasis (**bold**, *italic*) to important terms
  - Organize content logically with clear sections"""
AUTO_FORMAT_OFF = "- Do NOT apply any formatting changes to the original notes"

KEY_TERMS_ON = """
- Highlight Key Terms: Extract the most important terms and concepts
  - Return as a JSON array of key terms
  - Include 5-10 most significant terms
  - Use each term exactly as it appears in the notes
  - Format: "highlights": ["term1", "term2", ...]"""
KEY_TERMS_OFF = "- Do NOT extract or highlight any key terms"

COMMENTS_ON = """
- Comments/Insight: Generate helpful learning insights
  - Provide brief explanations of complex concepts
  - Add memory tips or mnemonics where helpful
  - Suggest connections between related ideas
  - Return as a JSON array of comments
  - Format: "comments": ["insight1", "insight2", ...]"""
COMMENTS_OFF = "- Do NOT generate any comments or insights"

# option field -> (enabled fragment, disabled fragment)
OPTION_FRAGMENTS: Dict[str, Tuple[str, str]] = {
    "auto_format": (AUTO_FORMAT_ON, AUTO_FORMAT_OFF),
    "highlight_key_terms": (KEY_TERMS_ON, KEY_TERMS_OFF),
    "comments": (COMMENTS_ON, COMMENTS_OFF),
}

USER_TURN_TEMPLATE = "Please transform these notes according to the criteria specified:\n\n{text}"


@dataclass(frozen=True)
class InstructionSet:
    system_prompt: str
    user_prompt: str
    fragments: Tuple[str, ...]
    output_schema: str

    def as_messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_prompt},
        ]


def build_fragments(options: TransformOptions) -> Tuple[str, ...]:
    """One fragment per option, in a fixed order."""
    fragments: List[str] = []
    for field_name, (enabled, disabled) in OPTION_FRAGMENTS.items():
        fragments.append(enabled if getattr(options, field_name) else disabled)
    return tuple(fragments)


def build_output_schema(options: TransformOptions) -> str:
    formatted = (
        "the transformed notes (with formatting if requested, plain if not)"
    )
    highlights = ["key", "terms", "here"] if options.highlight_key_terms else []
    comments = ["comment1", "comment2"] if options.comments else []
    return (
        "{\n"
        f'  "formattedText": {json.dumps(formatted)},\n'
        f'  "highlights": {json.dumps(highlights)},\n'
        f'  "comments": {json.dumps(comments)}\n'
        "}"
    )


def build_instructions(options: TransformOptions, text: str) -> InstructionSet:
    fragments = build_fragments(options)
    schema = build_output_schema(options)

    system_prompt = (
        f"{PREAMBLE}\n\n"
        "TRANSFORMATION CRITERIA:\n"
        f"{chr(10).join(fragments)}\n\n"
        "OUTPUT FORMAT (valid JSON):\n"
        f"{schema}"
    )
    return InstructionSet(
        system_prompt=system_prompt,
        user_prompt=USER_TURN_TEMPLATE.format(text=text),
        fragments=fragments,
        output_schema=schema,
    )
