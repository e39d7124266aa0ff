from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.llm_client import InferenceClient, get_inference_client
from app.models.transform import (
    DefinitionRequest,
    DefinitionResponse,
    ErrorResponse,
    TransformRequest,
    TransformResult,
)
from app.services.notes_transform import transform_notes
from app.services.term_definition import define_term

router = APIRouter(tags=["transform"])

_ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 401, 429, 500, 503)
}


@router.post(
    "/api/transform",
    response_model=TransformResult,
    responses=_ERROR_RESPONSES,
)
async def transform(
    request: TransformRequest,
    client: InferenceClient = Depends(get_inference_client),
) -> TransformResult:
    """Reformat notes and optionally extract key terms and study comments.

    Expects JSON: {"text": "...", "options": {"autoFormat": true,
    "highlightKeyTerms": true, "comments": false}}
    """
    return await transform_notes(request, client)


@router.post(
    "/api/term-definition",
    response_model=DefinitionResponse,
    responses=_ERROR_RESPONSES,
)
async def term_definition(
    request: DefinitionRequest,
    client: InferenceClient = Depends(get_inference_client),
) -> DefinitionResponse:
    """Return a 1-3 sentence definition of a key term.

    Expects JSON: {"term": "mitochondria", "context": "notes text"}
    """
    return await define_term(request, client)
