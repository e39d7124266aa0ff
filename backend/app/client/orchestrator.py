"""
Client-side driver for the transform and definition endpoints.

One ``TransformOrchestrator`` backs one editor session. It keeps the option
switches, runs a transform, and then loads a definition for every extracted
key term in parallel. Definitions land in a term -> text cache that is swapped
in whole once every lookup has settled.

Each transform (and each note switch) starts a new generation. A definition
batch only writes the cache if its generation is still the current one when it
finishes, so results from a superseded transform are dropped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import httpx

from app.core.logging import get_logger
from app.models.transform import TransformOptions, TransformResult
from app.services.highlight import highlight_key_terms
from app.services.notes_transform import enforce_option_invariant

logger = get_logger("transform_orchestrator")

DEFAULT_API_BASE = "http://localhost:8000"
FAILED_DEFINITION = "Failed to load definition"
MISSING_DEFINITION = "No definition available"
GENERIC_TRANSFORM_ERROR = "Failed to transform notes"

_EMPTY_CACHE: Mapping[str, str] = MappingProxyType({})


class TransformState(str, Enum):
    IDLE = "idle"
    TRANSFORMING = "transforming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DefinitionsState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class DefinitionView:
    """What the definition popup shows for a term."""
    term: str
    status: str  # "ready", "loading" or "absent"
    definition: Optional[str] = None


class TransformOrchestrator:
    def __init__(self, http_client: httpx.AsyncClient, owns_client: bool = False):
        self._http = http_client
        self._owns_client = owns_client

        self.options = TransformOptions(
            auto_format=False, highlight_key_terms=False, comments=False
        )
        self.state = TransformState.IDLE
        self.definitions_state = DefinitionsState.IDLE
        self.result: Optional[TransformResult] = None
        self.error: Optional[str] = None
        self.selected_term: Optional[str] = None

        self._definitions: Mapping[str, str] = _EMPTY_CACHE
        self._generation = 0

    @classmethod
    def for_api(cls, api_base: str = DEFAULT_API_BASE, timeout: Optional[float] = None):
        """Build an orchestrator with its own HTTP client (closed by ``aclose``)."""
        client = httpx.AsyncClient(base_url=api_base, timeout=timeout)
        return cls(client, owns_client=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "TransformOrchestrator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── options ──────────────────────────────────────────────

    def toggle_option(self, name: str) -> TransformOptions:
        """Flip one switch; accepts field names or wire names (``autoFormat``)."""
        field = _option_field(name)
        current = getattr(self.options, field)
        self.options = self.options.model_copy(update={field: not current})
        return self.options

    def set_options(self, **switches: bool) -> TransformOptions:
        updates = {_option_field(name): bool(value) for name, value in switches.items()}
        self.options = self.options.model_copy(update=updates)
        return self.options

    # ── state ────────────────────────────────────────────────

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def definitions(self) -> Mapping[str, str]:
        """Read-only view of the current term -> definition cache."""
        return self._definitions

    @property
    def is_transforming(self) -> bool:
        return self.state == TransformState.TRANSFORMING

    def _start_generation(self) -> int:
        self._generation += 1
        return self._generation

    def switch_note(self) -> None:
        """Drop everything tied to the previous note; in-flight work is ignored."""
        self._start_generation()
        self.state = TransformState.IDLE
        self.result = None
        self.error = None
        self.selected_term = None
        self._definitions = _EMPTY_CACHE
        self.definitions_state = DefinitionsState.IDLE

    # ── transform ────────────────────────────────────────────

    async def transform(self, text: str) -> Optional[TransformResult]:
        """Transform ``text`` with the current options.

        Returns the result, or None when the call failed or a newer
        transform or note switch superseded it, including while its
        definitions were still loading. When key terms are on and present,
        returns only after their definitions have been loaded.
        """
        generation = self._start_generation()
        options = self.options

        self.state = TransformState.TRANSFORMING
        self.result = None
        self.error = None
        self.selected_term = None
        self._definitions = _EMPTY_CACHE
        self.definitions_state = DefinitionsState.IDLE

        payload = {"text": text, "options": options.model_dump(by_alias=True)}
        try:
            response = await self._http.post("/api/transform", json=payload)
            if response.status_code != 200:
                self._fail(generation, _error_message(response))
                return None
            result = TransformResult.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Transform request failed: %s", exc)
            self._fail(generation, str(exc) or GENERIC_TRANSFORM_ERROR)
            return None

        if generation != self._generation:
            logger.info("Discarding transform result from generation %d", generation)
            return None

        result = enforce_option_invariant(result, options)
        self.result = result
        self.state = TransformState.SUCCEEDED

        if options.highlight_key_terms and result.highlights:
            if not await self.load_definitions(result.highlights, text, generation):
                return None

        return result

    def _fail(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        self.error = message
        self.state = TransformState.FAILED

    # ── definitions ──────────────────────────────────────────

    async def load_definitions(
        self, terms: Iterable[str], context: str, generation: Optional[int] = None
    ) -> bool:
        """Fetch every term's definition in parallel and swap the cache in.

        Returns False when the batch finished after a newer generation began,
        in which case nothing is written.
        """
        if generation is None:
            generation = self._generation
        distinct = list(dict.fromkeys(terms))

        self.definitions_state = DefinitionsState.LOADING
        entries: List[Tuple[str, str]] = await asyncio.gather(
            *(self._fetch_definition(term, context) for term in distinct)
        )

        if generation != self._generation:
            logger.info(
                "Discarding stale definitions batch (generation %d, current %d)",
                generation,
                self._generation,
            )
            return False

        self._definitions = MappingProxyType(dict(entries))
        self.definitions_state = DefinitionsState.READY
        return True

    async def _fetch_definition(self, term: str, context: str) -> Tuple[str, str]:
        # Never raises: a failed lookup becomes a fallback entry
        try:
            response = await self._http.post(
                "/api/term-definition", json={"term": term, "context": context}
            )
            response.raise_for_status()
            data = response.json()
        except Exception as exc:
            logger.warning("Definition lookup for %r failed: %s", term, exc)
            return term, FAILED_DEFINITION

        definition = data.get("definition") if isinstance(data, dict) else None
        return term, definition or MISSING_DEFINITION

    # ── display ──────────────────────────────────────────────

    def definition_for(self, term: str) -> DefinitionView:
        """Cache lookup only; never triggers a request."""
        definition = self._definitions.get(term)
        if definition is not None:
            return DefinitionView(term=term, status="ready", definition=definition)
        if self.definitions_state == DefinitionsState.LOADING:
            return DefinitionView(term=term, status="loading")
        return DefinitionView(term=term, status="absent")

    def select_term(self, term: str) -> DefinitionView:
        self.selected_term = term
        return self.definition_for(term)

    def clear_selection(self) -> None:
        self.selected_term = None

    def render_highlighted(self, tag: str = "mark") -> str:
        """The result text with every cached term wrapped in ``<tag>``."""
        if self.result is None:
            return ""
        return highlight_key_terms(self.result.formatted_text, list(self._definitions), tag=tag)


_OPTION_ALIASES: Dict[str, str] = {
    "autoFormat": "auto_format",
    "highlightKeyTerms": "highlight_key_terms",
    "comments": "comments",
}


def _option_field(name: str) -> str:
    if name in TransformOptions.model_fields:
        return name
    try:
        return _OPTION_ALIASES[name]
    except KeyError:
        raise ValueError(f"Unknown transform option: {name}") from None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_TRANSFORM_ERROR
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return GENERIC_TRANSFORM_ERROR
