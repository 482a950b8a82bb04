import asyncio
import json

import pytest

from scholarai.config import AILimits
from scholarai.errors import MalformedResponse
from scholarai.models.paper import AIReviewResult, ChatMessage
from scholarai.prompts import (
    CHAT_PRIMING_REPLY,
    EDITOR_SYSTEM_INSTRUCTION,
    IMPROVE_INSTRUCTIONS,
    PAPER_END,
    PAPER_START,
    REVIEW_RESPONSE_SCHEMA,
    REVIEWER_SYSTEM_INSTRUCTION,
    TRUNCATION_MARKER,
)
from scholarai.services.ai_gateway import (
    CHAT_EMPTY,
    CHAT_FAILED,
    SUMMARY_EMPTY,
    SUMMARY_FAILED,
    SUMMARY_TEMPERATURE,
    AIGateway,
    FallbackPolicy,
    parse_review,
)

from tests.conftest import FakeBackend

GOOD_REVIEW = {
    "summary": "Solid work.",
    "strengths": ["Clear method"],
    "weaknesses": ["Small dataset"],
    "score": 7.5,
}


# ── summarize ─────────────────────────────────────────────────────────

async def test_summarize_sends_prompt_and_settings(gateway, backend):
    backend.queue("A short summary.")

    assert await gateway.summarize("Paper body") == "A short summary."
    call = backend.last
    assert "Paper body" in call["contents"]
    assert "150 words" in call["contents"]
    assert call["system_instruction"] == EDITOR_SYSTEM_INSTRUCTION
    assert call["temperature"] == SUMMARY_TEMPERATURE


async def test_summarize_empty_reply(gateway, backend):
    backend.queue("   ")
    assert await gateway.summarize("x") == SUMMARY_EMPTY


async def test_summarize_failure(gateway, backend):
    backend.queue(RuntimeError("boom"))
    assert await gateway.summarize("x") == SUMMARY_FAILED


# ── review ────────────────────────────────────────────────────────────

async def test_review_parses_structured_reply(gateway, backend):
    backend.queue(json.dumps(GOOD_REVIEW))

    result = await gateway.review("Paper body")

    assert result == AIReviewResult(**GOOD_REVIEW)
    assert not result.degraded
    assert backend.last["system_instruction"] == REVIEWER_SYSTEM_INSTRUCTION
    assert backend.last["response_schema"] == REVIEW_RESPONSE_SCHEMA


async def test_review_accepts_fenced_json(gateway, backend):
    backend.queue("```json\n" + json.dumps(GOOD_REVIEW) + "\n```")
    assert (await gateway.review("x")).score == 7.5


async def test_review_submits_only_first_10000_chars(gateway, backend):
    text = "a" * 10_000 + "b" * 15_000
    backend.queue(json.dumps(GOOD_REVIEW))

    await gateway.review(text)

    prompt = backend.last["contents"]
    assert "a" * 10_000 + TRUNCATION_MARKER in prompt
    assert "b" not in prompt.split("Paper Text:\n", 1)[1]


async def test_review_short_text_is_sent_whole(gateway, backend):
    backend.queue(json.dumps(GOOD_REVIEW))
    await gateway.review("tiny paper")
    assert "tiny paper" + TRUNCATION_MARKER in backend.last["contents"]


@pytest.mark.parametrize("reply", [
    RuntimeError("network down"),
    "",
    "not json at all",
    "{broken json",
    json.dumps({**GOOD_REVIEW, "extra": 1}),
    json.dumps({k: v for k, v in GOOD_REVIEW.items() if k != "score"}),
    json.dumps({**GOOD_REVIEW, "score": "7"}),
    json.dumps({**GOOD_REVIEW, "score": True}),
    json.dumps({**GOOD_REVIEW, "strengths": "Clear method"}),
])
async def test_review_failures_yield_sentinel(gateway, backend, reply):
    backend.queue(reply)

    result = await gateway.review("x")

    assert result == AIReviewResult.failed()
    assert result.degraded


def test_parse_review_raises_malformed():
    with pytest.raises(MalformedResponse):
        parse_review("[1, 2, 3]")


# ── chat ──────────────────────────────────────────────────────────────

async def test_chat_rebuilds_full_context(gateway, backend):
    history = [
        ChatMessage(id="1", role="user", text="What is Q-Edge?", timestamp=1),
        ChatMessage(id="2", role="model", text="A quantization framework.", timestamp=2),
    ]
    backend.queue("ResNet-50.")

    reply = await gateway.chat("Which teacher model?", "PAPER BODY", history)

    assert reply == "ResNet-50."
    turns = backend.last["contents"]
    assert [t.role for t in turns] == ["user", "model", "user", "model", "user"]
    assert PAPER_START in turns[0].text and PAPER_END in turns[0].text
    assert "PAPER BODY" in turns[0].text
    assert turns[1].text == CHAT_PRIMING_REPLY
    assert [t.text for t in turns[2:]] == [
        "What is Q-Edge?",
        "A quantization framework.",
        "Which teacher model?",
    ]


async def test_chat_truncates_paper_to_20000_chars(gateway, backend):
    text = "a" * 20_000 + "b" * 5_000

    await gateway.chat("hi", text)

    context = backend.last["contents"][0].text
    assert "a" * 20_000 + "\n" + PAPER_END in context
    assert "ab" not in context


async def test_chat_empty_reply(gateway, backend):
    backend.queue("")
    assert await gateway.chat("hi", "paper") == CHAT_EMPTY


async def test_chat_failure(gateway, backend):
    backend.queue(ConnectionError("offline"))
    assert await gateway.chat("hi", "paper") == CHAT_FAILED


async def test_timeout_counts_as_failure():
    async def slow(_contents):
        await asyncio.sleep(5)
        return "late"

    backend = FakeBackend(slow)
    gateway = AIGateway(backend, AILimits(request_timeout=0.05))

    assert await gateway.chat("hi", "paper") == CHAT_FAILED


# ── improve_text ──────────────────────────────────────────────────────

@pytest.mark.parametrize("mode", ["grammar", "clarity", "academic"])
async def test_improve_uses_mode_instruction(gateway, backend, mode):
    backend.queue("Better text.")

    assert await gateway.improve_text("bad text", mode) == "Better text."
    assert backend.last["system_instruction"] == IMPROVE_INSTRUCTIONS[mode]
    assert "bad text" in backend.last["contents"]


async def test_improve_failure_returns_input(gateway, backend):
    backend.queue(RuntimeError("quota"))
    assert await gateway.improve_text("keep me", "grammar") == "keep me"


async def test_improve_empty_reply_returns_input(gateway, backend):
    backend.queue("  \n")
    assert await gateway.improve_text("keep me", "clarity") == "keep me"


async def test_improve_unknown_mode(gateway, backend):
    with pytest.raises(ValueError):
        await gateway.improve_text("text", "poetry")
    assert backend.calls == []


async def test_policy_override():
    backend = FakeBackend(RuntimeError("down"))
    gateway = AIGateway(
        backend,
        policies={"chat": FallbackPolicy(on_empty=lambda t: "empty", on_failure=lambda t: f"retry: {t}")},
    )
    assert await gateway.chat("hello", "paper") == "retry: hello"
