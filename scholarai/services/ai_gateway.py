"""AI gateway: the only path from the application to the language model.

Four operations (``summarize``, ``review``, ``chat``, ``improve_text``),
each shaped, truncated and bounded by a timeout here.  Backend failures
never propagate: every operation has an entry in :data:`FALLBACK_POLICIES`
saying what it returns instead.

==============  ===============================  ==========================
operation       empty reply                      failure
==============  ===============================  ==========================
summarize       "Could not generate summary."    apologetic string
review          degraded ``AIReviewResult``      degraded ``AIReviewResult``
chat            "I couldn't understand that."    apologetic string
improve_text    input text unchanged             input text unchanged
==============  ===============================  ==========================
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from scholarai.config import AILimits
from scholarai.errors import AIGatewayError, MalformedResponse, RequestFailure
from scholarai.models.paper import AIReviewResult
from scholarai.prompts import (
    CHAT_PRIMING_REPLY,
    CHAT_READY_MESSAGE,
    EDITOR_SYSTEM_INSTRUCTION,
    IMPROVE_INSTRUCTIONS,
    REVIEW_RESPONSE_SCHEMA,
    REVIEWER_SYSTEM_INSTRUCTION,
    chat_context_prompt,
    improve_prompt,
    review_prompt,
    summary_prompt,
)
from scholarai.services.ai_backend import AIBackend, Contents, Turn
from scholarai.utils.text import extract_json_object, is_blank, truncate

logger = logging.getLogger(__name__)

IMPROVE_MODES = tuple(IMPROVE_INSTRUCTIONS)

SUMMARY_EMPTY = "Could not generate summary."
SUMMARY_FAILED = "Failed to generate summary. Please check your API key."
CHAT_EMPTY = "I couldn't understand that."
CHAT_FAILED = "I'm having trouble connecting to the AI service right now."

SUMMARY_TEMPERATURE = 0.3


# ---------------------------------------------------------------------------
# Fallback policy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FallbackPolicy:
    """Values an operation returns instead of raising.

    Both callables receive the operation's primary input text.
    """

    on_empty: Callable[[str], Any]
    on_failure: Callable[[str], Any]


FALLBACK_POLICIES: dict[str, FallbackPolicy] = {
    "summarize": FallbackPolicy(
        on_empty=lambda _text: SUMMARY_EMPTY,
        on_failure=lambda _text: SUMMARY_FAILED,
    ),
    "review": FallbackPolicy(
        on_empty=lambda _text: AIReviewResult.failed(),
        on_failure=lambda _text: AIReviewResult.failed(),
    ),
    "chat": FallbackPolicy(
        on_empty=lambda _text: CHAT_EMPTY,
        on_failure=lambda _text: CHAT_FAILED,
    ),
    "improve_text": FallbackPolicy(
        on_empty=lambda text: text,
        on_failure=lambda text: text,
    ),
}


# ---------------------------------------------------------------------------
# Review schema
# ---------------------------------------------------------------------------

class ReviewPayload(BaseModel):
    """Exact shape the backend must return for a review."""

    model_config = ConfigDict(extra="forbid")

    summary: str
    strengths: list[str]
    weaknesses: list[str]
    score: float

    @field_validator("score", mode="before")
    @classmethod
    def _score_is_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("score must be a number")
        return value

    def to_result(self) -> AIReviewResult:
        return AIReviewResult(
            summary=self.summary,
            strengths=list(self.strengths),
            weaknesses=list(self.weaknesses),
            score=self.score,
        )


def parse_review(response_text: str) -> AIReviewResult:
    """Validate a JSON review reply.

    Raises:
        MalformedResponse: No JSON object, invalid JSON, or schema mismatch
    """
    json_text = extract_json_object(response_text)
    if json_text is None:
        raise MalformedResponse("review reply contains no JSON object")
    try:
        return ReviewPayload.model_validate_json(json_text).to_result()
    except ValidationError as e:
        raise MalformedResponse(f"review reply failed validation: {e}") from e


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class HistoryEntry(Protocol):
    role: str
    text: str


class AIGateway:
    """Mediates every AI request the sessions make."""

    def __init__(
        self,
        backend: AIBackend,
        limits: Optional[AILimits] = None,
        policies: Optional[dict[str, FallbackPolicy]] = None,
    ):
        """Initialize the gateway.

        Args:
            backend: Injected model capability, created once at startup
            limits: Truncation limits and request timeout
            policies: Per-operation fallbacks (defaults to FALLBACK_POLICIES)
        """
        self.backend = backend
        self.limits = limits or AILimits()
        self.policies = {**FALLBACK_POLICIES, **(policies or {})}

    async def _request(self, operation: str, contents: Contents, **kwargs: Any) -> str:
        """Single bounded backend call; every error becomes a RequestFailure."""
        timeout = self.limits.request_timeout
        try:
            return await asyncio.wait_for(
                self.backend.generate(contents, **kwargs),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestFailure(f"{operation} timed out after {timeout}s") from e
        except Exception as e:
            raise RequestFailure(f"{operation} request failed: {e}") from e

    async def _run(
        self,
        operation: str,
        source: str,
        contents: Contents,
        parse: Optional[Callable[[str], Any]] = None,
        **kwargs: Any,
    ) -> Any:
        """Call the backend and apply the operation's fallback policy."""
        policy = self.policies[operation]
        try:
            reply = await self._request(operation, contents, **kwargs)
            if is_blank(reply):
                logger.warning("%s: empty response from backend", operation)
                return policy.on_empty(source)
            return parse(reply) if parse else reply
        except AIGatewayError as e:
            logger.error("%s error: %s", operation, e)
            return policy.on_failure(source)

    async def summarize(self, text: str) -> str:
        """Concise (≤150 words) problem/method/results summary."""
        return await self._run(
            "summarize",
            text,
            summary_prompt(text),
            system_instruction=EDITOR_SYSTEM_INSTRUCTION,
            temperature=SUMMARY_TEMPERATURE,
        )

    async def review(self, text: str) -> AIReviewResult:
        """Structured peer review of the first ``review_max_chars`` characters."""
        excerpt = truncate(text, self.limits.review_max_chars)
        return await self._run(
            "review",
            text,
            review_prompt(excerpt),
            parse=parse_review,
            system_instruction=REVIEWER_SYSTEM_INSTRUCTION,
            response_schema=REVIEW_RESPONSE_SCHEMA,
        )

    def build_chat_contents(
        self,
        message: str,
        paper_content: str,
        history: Iterable[HistoryEntry],
    ) -> list[Turn]:
        """Rebuild the whole conversation for a stateless chat request.

        Context block and priming exchange first, then the prior history in
        order, then the new user message.
        """
        excerpt = truncate(paper_content, self.limits.chat_max_chars)
        turns = [
            Turn("user", f"{chat_context_prompt(excerpt)}\n\n{CHAT_READY_MESSAGE}"),
            Turn("model", CHAT_PRIMING_REPLY),
        ]
        turns.extend(Turn(entry.role, entry.text) for entry in history)
        turns.append(Turn("user", message))
        return turns

    async def chat(
        self,
        message: str,
        paper_content: str,
        history: Iterable[HistoryEntry] = (),
    ) -> str:
        """Answer *message* about the paper given the prior transcript."""
        contents = self.build_chat_contents(message, paper_content, history)
        return await self._run("chat", message, contents)

    async def improve_text(self, text: str, mode: str) -> str:
        """Rewrite *text*; returns it unchanged if the request fails.

        Raises:
            ValueError: Unknown *mode*
        """
        if mode not in IMPROVE_INSTRUCTIONS:
            raise ValueError(f"Unknown improve mode {mode!r}; expected one of {IMPROVE_MODES}")
        return await self._run(
            "improve_text",
            text,
            improve_prompt(text),
            system_instruction=IMPROVE_INSTRUCTIONS[mode],
        )
