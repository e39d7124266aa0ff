"""
Recover a TransformResult from a free-text model reply.

Replies arrive in several shapes: clean JSON, JSON inside a fenced code block,
or JSON with prose before and after it. Some upstreams also answer HTTP 200
with an error message as the content; those are caught before any parsing.
"""

from __future__ import annotations

import json
import re
from typing import Any, List

from app.core.errors import MalformedResponse, UpstreamError, excerpt
from app.core.logging import get_logger
from app.models.transform import TransformResult

logger = get_logger("response_recovery")

IN_BAND_ERROR_MARKERS = ("error", "internal", "overloaded")

FENCE = "```"
# Opening fence with an optional language tag ("```json")
_FENCE_OPENING_RE = re.compile(r"```[A-Za-z0-9_+-]*")


class InBandUpstreamError(UpstreamError):
    """The model reply itself reports a failure."""

    status_code = 503
    default_message = (
        "The inference API returned an error. This may be due to: "
        "1) API overload, 2) Invalid token, or 3) Model unavailable. "
        "Please try again in a few moments."
    )


def contains_in_band_error(raw: str) -> bool:
    # Substring heuristic: notes that talk about "errors" can trip it too
    lowered = raw.lower()
    return any(marker in lowered for marker in IN_BAND_ERROR_MARKERS)


def strip_code_fence(raw: str) -> str:
    """Unwrap a reply that sits inside a fenced block.

    Only a fence opening before the first '{' wraps the reply; fences inside
    the JSON belong to the formatted notes. The interior runs to the last
    closing fence, or to the end when the block is unterminated.
    """
    opening = raw.find(FENCE)
    if opening == -1:
        return raw
    brace = raw.find("{")
    if brace != -1 and brace < opening:
        return raw

    start = _FENCE_OPENING_RE.match(raw, opening).end()
    closing = raw.rfind(FENCE)
    if closing < start:
        closing = len(raw)
    return raw[start:closing].strip()


def slice_outer_object(text: str) -> str:
    """Text from the first '{' to the last '}', or the input if there is none."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return text
    return text[start : end + 1]


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def coerce_result(payload: Any) -> TransformResult:
    formatted = payload.get("formattedText")
    if not isinstance(formatted, str):
        # Replies following the older field name
        formatted = payload.get("formattedNotes")
    return TransformResult(
        formatted_text=formatted if isinstance(formatted, str) else "",
        highlights=_string_list(payload.get("highlights")),
        comments=_string_list(payload.get("comments")),
    )


def recover_transform_result(raw: str) -> TransformResult:
    """Parse a model reply into a TransformResult.

    Raises:
        InBandUpstreamError: the reply carries an error phrase; no parse is tried.
        MalformedResponse: nothing parseable as a JSON object was found.
    """
    if contains_in_band_error(raw):
        logger.error("Inference reply reports an error: %s", excerpt(raw))
        raise InBandUpstreamError(details=excerpt(raw))

    candidate = slice_outer_object(strip_code_fence(raw))

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse transform reply: %s", exc)
        raise MalformedResponse(details=excerpt(raw)) from exc

    if not isinstance(payload, dict):
        logger.error("Transform reply is JSON but not an object: %s", type(payload).__name__)
        raise MalformedResponse(details=excerpt(raw))

    return coerce_result(payload)
