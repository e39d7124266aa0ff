from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, field_validator


class TransformOptions(BaseModel):
    """The three independent transformation switches."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    auto_format: StrictBool = Field(..., alias="autoFormat")
    highlight_key_terms: StrictBool = Field(..., alias="highlightKeyTerms")
    comments: StrictBool = Field(...)


class TransformRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Older clients send the editor text as "notes"
    text: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("text", "notes"),
        description="Note text to transform; the caller owns trimming",
    )
    options: TransformOptions


class TransformResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    formatted_text: str = Field("", alias="formattedText")
    highlights: List[str] = Field(default_factory=list)
    comments: List[str] = Field(default_factory=list)


class DefinitionRequest(BaseModel):
    term: str = Field(..., min_length=1, description="The highlighted term")
    context: str = Field("", description="Surrounding note text, may be empty")

    @field_validator("context", mode="before")
    @classmethod
    def _none_context_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class DefinitionResponse(BaseModel):
    term: str
    definition: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
