from __future__ import annotations

from typing import Dict, List

from app.core.config import settings
from app.core.errors import EmptyResponse, classify_upstream_error
from app.core.llm_client import InferenceClient
from app.core.logging import get_logger
from app.models.transform import DefinitionRequest, DefinitionResponse

logger = get_logger("term_definition")

SYSTEM_PROMPT = """You are a helpful tutor that provides clear, concise definitions of academic terms.
Your definitions should be:
- Accurate and based on the context provided
- Concise (1-3 sentences maximum)
- Easy to understand for students
- Free of unnecessary jargon
Return ONLY the definition, nothing else."""


def build_definition_messages(term: str, context: str = "") -> List[Dict[str, str]]:
    if context:
        user_message = f'Define the term "{term}" in the context of: {context}'
    else:
        user_message = f'Provide a clear, academic definition of the term: "{term}"'
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_message},
    ]


async def define_term(
    request: DefinitionRequest, client: InferenceClient
) -> DefinitionResponse:
    """Return a short definition of one term; the reply is used as plain text."""
    try:
        content = await client.chat(
            service_name="term_definition",
            messages=build_definition_messages(request.term, request.context),
            model=settings.definition_model,
            temperature=settings.definition_temperature,
            max_tokens=settings.definition_max_tokens,
        )
    except Exception as exc:
        raise classify_upstream_error(exc) from exc

    definition = (content or "").strip()
    if not definition:
        logger.warning("Empty definition returned for %r", request.term)
        raise EmptyResponse()

    return DefinitionResponse(term=request.term, definition=definition)
