from __future__ import annotations

from typing import Dict, List

from app.core.config import settings
from app.core.errors import UpstreamError, classify_upstream_error
from app.core.llm_client import InferenceClient
from app.core.logging import get_logger
from app.models.transform import TransformOptions, TransformRequest, TransformResult
from app.services.instruction_builder import build_instructions
from app.services.response_recovery import recover_transform_result

logger = get_logger("notes_transform")


def enforce_option_invariant(
    result: TransformResult, options: TransformOptions
) -> TransformResult:
    """Blank out list fields whose option was off, whatever the model sent."""
    updates: Dict[str, List[str]] = {}
    if not options.highlight_key_terms and result.highlights:
        logger.warning("Dropping %d highlights returned while disabled", len(result.highlights))
        updates["highlights"] = []
    if not options.comments and result.comments:
        logger.warning("Dropping %d comments returned while disabled", len(result.comments))
        updates["comments"] = []
    return result.model_copy(update=updates) if updates else result


async def transform_notes(
    request: TransformRequest, client: InferenceClient
) -> TransformResult:
    """Run one transform: prompt, call the model, recover, enforce options."""
    instructions = build_instructions(request.options, request.text)
    logger.info(
        "Transforming %d chars (format=%s, terms=%s, comments=%s)",
        len(request.text),
        request.options.auto_format,
        request.options.highlight_key_terms,
        request.options.comments,
    )

    try:
        content = await client.chat(
            service_name="notes_transform",
            messages=instructions.as_messages(),
            model=settings.transform_model,
            temperature=settings.transform_temperature,
            max_tokens=settings.transform_max_tokens,
        )
    except Exception as exc:
        raise classify_upstream_error(exc) from exc

    if not content:
        raise UpstreamError("No response content received from the inference API")

    result = recover_transform_result(content)
    return enforce_option_invariant(result, request.options)
