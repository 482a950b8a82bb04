"""Per-paper reading state: chat transcript and cached AI review."""

import asyncio
import copy
import logging
import time
from typing import Literal, Optional

from scholarai.models.paper import AIReviewResult, ChatMessage, Paper
from scholarai.services.ai_gateway import AIGateway
from scholarai.utils.text import is_blank

logger = logging.getLogger(__name__)


class ReadingSession:
    """Chat and review state for one paper, discarded when the reader closes.

    * Chat sends are serialised FIFO so transcript order matches send order.
    * The review is requested at most once; concurrent callers share the
      in-flight request and later callers get the cached result.
    """

    def __init__(self, paper: Paper, gateway: AIGateway):
        self.paper = copy.deepcopy(paper)
        self.gateway = gateway
        self.messages: list[ChatMessage] = []
        self.review: Optional[AIReviewResult] = None
        self.summary: Optional[str] = None
        self.closed = False
        self._send_lock = asyncio.Lock()
        self._pending_sends = 0
        self._review_task: Optional[asyncio.Future] = None
        self._last_message_ms = 0
        self._epoch = 0

    @property
    def paper_id(self) -> str:
        return self.paper.id

    @property
    def typing(self) -> bool:
        """True while a chat reply is outstanding."""
        return self._pending_sends > 0

    @property
    def reviewing(self) -> bool:
        return self._review_task is not None

    def _new_message(self, role: Literal["user", "model"], text: str) -> ChatMessage:
        """Build a message whose id is strictly greater than the previous one."""
        now_ms = time.time_ns() // 1_000_000
        message_ms = max(now_ms, self._last_message_ms + 1)
        self._last_message_ms = message_ms
        return ChatMessage(id=str(message_ms), role=role, text=text, timestamp=now_ms)

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        """Send a chat message and append the model's reply.

        Args:
            text: User message; blank input is rejected

        Returns:
            The model ChatMessage, or None if the input was blank or the
            session was closed or reset before the reply arrived
        """
        if is_blank(text) or self.closed:
            return None

        epoch = self._epoch
        self._pending_sends += 1
        try:
            async with self._send_lock:
                if self._stale(epoch):
                    return None
                history = list(self.messages)
                self.messages.append(self._new_message("user", text))
                reply = await self.gateway.chat(text, self.paper.content, history)
                if self._stale(epoch):
                    logger.debug("Reader for paper %s closed or reset; discarding reply", self.paper_id)
                    return None
                message = self._new_message("model", reply)
                self.messages.append(message)
                return message
        finally:
            self._pending_sends -= 1

    async def generate_review(self) -> AIReviewResult:
        """Return the cached review, requesting it on first use.

        A degraded (failed) review is returned but not cached, so a later
        call tries again.
        """
        if self.review is not None:
            return self.review
        if self._review_task is None:
            self._review_task = asyncio.ensure_future(self._fetch_review(self._epoch))
        return await asyncio.shield(self._review_task)

    async def _fetch_review(self, epoch: int) -> AIReviewResult:
        try:
            result = await self.gateway.review(self.paper.content)
        finally:
            if self._review_task is asyncio.current_task():
                self._review_task = None
        if self._stale(epoch):
            logger.debug("Reader for paper %s closed or reset; discarding review", self.paper_id)
        elif result.degraded:
            logger.warning("Review for paper %s failed; not caching", self.paper_id)
        else:
            self.review = result
        return result

    async def summarize(self) -> str:
        epoch = self._epoch
        summary = await self.gateway.summarize(self.paper.content)
        if not self._stale(epoch):
            self.summary = summary
        return summary

    def _stale(self, epoch: int) -> bool:
        """True once the session closed or was reset after *epoch*."""
        return self.closed or epoch != self._epoch

    def reset(self) -> None:
        """Forget the transcript, summary and cached review.

        Replies and reviews still in flight are discarded when they land.
        """
        self._epoch += 1
        self.messages = []
        self.review = None
        self.summary = None
        self._review_task = None

    def close(self) -> None:
        """Tear down; results arriving afterwards are discarded."""
        self.closed = True

    def to_dict(self) -> dict:
        return {
            "paper_id": self.paper_id,
            "messages": [m.to_dict() for m in self.messages],
            "typing": self.typing,
            "reviewing": self.reviewing,
            "review": self.review.to_dict() if self.review else None,
            "summary": self.summary,
        }
