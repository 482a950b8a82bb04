"""Edit buffer for a single paper."""

import copy
import dataclasses
import logging
from typing import Optional

from scholarai.config import AILimits
from scholarai.database.repository import PaperRepository
from scholarai.errors import ContentTooLarge
from scholarai.models.paper import Paper
from scholarai.services.ai_gateway import IMPROVE_MODES, AIGateway

logger = logging.getLogger(__name__)

NOTICE_REWRITING = "AI is rewriting your text..."
NOTICE_UPDATED = "Text updated successfully!"
NOTICE_UNCHANGED = "No changes were made."


class EditorSession:
    """Draft title/content for one paper until it is saved or discarded.

    Only one improve request may be outstanding at a time; a second
    trigger while one is running is rejected, not queued.
    """

    def __init__(
        self,
        paper: Paper,
        repo: PaperRepository,
        gateway: AIGateway,
        limits: Optional[AILimits] = None,
    ):
        self.paper = copy.deepcopy(paper)
        self.repo = repo
        self.gateway = gateway
        self.improve_max_chars = (limits or gateway.limits).improve_max_chars
        self.title = paper.title
        self.content = paper.content
        self.notification: Optional[str] = None
        self.closed = False
        self._improving = False

    @property
    def paper_id(self) -> str:
        return self.paper.id

    @property
    def busy(self) -> bool:
        """True while an improve request is outstanding."""
        return self._improving

    @property
    def dirty(self) -> bool:
        return self.title != self.paper.title or self.content != self.paper.content

    def update_draft(self, title: Optional[str] = None, content: Optional[str] = None) -> None:
        """Replace the draft title and/or content."""
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content

    def save(self) -> Paper:
        """Merge the draft into the original paper and commit it.

        Everything except title and content is carried over unchanged.

        Returns:
            The committed Paper
        """
        updated = dataclasses.replace(
            copy.deepcopy(self.paper),
            title=self.title,
            content=self.content,
        )
        self.repo.update(updated)
        self.paper = updated
        logger.info("Saved draft for paper %s", updated.id)
        return copy.deepcopy(updated)

    async def improve(self, mode: str) -> bool:
        """Rewrite the whole draft content with the AI gateway.

        Args:
            mode: 'grammar', 'clarity' or 'academic'

        Returns:
            True if the content was replaced, False if the request was
            rejected (already busy), discarded, or produced no change

        Raises:
            ContentTooLarge: Draft exceeds ``improve_max_chars``; no request made
            ValueError: Unknown *mode*
        """
        if mode not in IMPROVE_MODES:
            raise ValueError(f"Unknown improve mode {mode!r}")
        if len(self.content) > self.improve_max_chars:
            error = ContentTooLarge(len(self.content), self.improve_max_chars)
            self.notification = str(error)
            raise error
        if self._improving:
            logger.debug("Improve already in flight for paper %s; ignoring", self.paper_id)
            return False

        self._improving = True
        self.notification = NOTICE_REWRITING
        original = self.content
        try:
            improved = await self.gateway.improve_text(original, mode)
        finally:
            self._improving = False

        if self.closed:
            logger.debug("Editor for paper %s closed; discarding rewrite", self.paper_id)
            return False
        if improved == original:
            self.notification = NOTICE_UNCHANGED
            return False
        self.content = improved
        self.notification = NOTICE_UPDATED
        return True

    def close(self) -> None:
        """Tear down; results arriving afterwards are discarded."""
        self.closed = True

    def to_dict(self) -> dict:
        return {
            "paper_id": self.paper_id,
            "title": self.title,
            "content": self.content,
            "notification": self.notification,
            "busy": self.busy,
            "dirty": self.dirty,
        }
