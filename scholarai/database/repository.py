"""Paper repository (in-memory, process lifetime only)."""

from __future__ import annotations

import copy
import logging
import time
from typing import Iterable, Optional

from scholarai.models.paper import Author, Paper, PaperStatus

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Untitled Draft"
PLACEHOLDER_ABSTRACT = "Add an abstract..."
PLACEHOLDER_CONTENT = "# Introduction\n\nStart writing..."


class PaperRepository:
    """Repository for paper create/read/update operations.

    Papers are held in a list ordered newest-created first.  Every paper
    handed out is a copy, so the only way to change a stored record is
    :meth:`update`.
    """

    def __init__(self, papers: Optional[Iterable[Paper]] = None):
        """Initialize repository with optional seed papers.

        Args:
            papers: Initial papers, in display order
        """
        self._papers: list[Paper] = [copy.deepcopy(p) for p in papers or []]
        self._last_id = 0

    def _new_id(self) -> str:
        """Time-derived id, bumped so ids stay unique within the process."""
        candidate = time.time_ns() // 1_000_000
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def list(self) -> list[Paper]:
        """Return all papers, newest-created first.

        Returns:
            List of Paper objects
        """
        return [copy.deepcopy(p) for p in self._papers]

    def get(self, paper_id: str) -> Optional[Paper]:
        """Find a single paper by ID.

        Args:
            paper_id: Paper ID to find

        Returns:
            Paper object if found, None otherwise
        """
        for paper in self._papers:
            if paper.id == paper_id:
                return copy.deepcopy(paper)
        return None

    def create(self, authors: list[Author]) -> Paper:
        """Create a placeholder draft and prepend it to the library.

        Args:
            authors: Ordered authors; the acting user should come first

        Returns:
            The newly created Paper
        """
        paper = Paper(
            id=self._new_id(),
            title=PLACEHOLDER_TITLE,
            abstract=PLACEHOLDER_ABSTRACT,
            content=PLACEHOLDER_CONTENT,
            authors=list(authors),
            status=PaperStatus.DRAFT,
            tags=[],
            citations=0,
        )
        self._papers.insert(0, paper)
        logger.info("Created paper %s", paper.id)
        return copy.deepcopy(paper)

    def update(self, paper: Paper) -> None:
        """Replace the stored record with the same id.

        Unknown ids are a silent no-op: callers always obtain ids from a
        prior ``list``/``create``.

        Args:
            paper: Full replacement record
        """
        for index, existing in enumerate(self._papers):
            if existing.id == paper.id:
                self._papers[index] = copy.deepcopy(paper)
                logger.info("Updated paper %s", paper.id)
                return
        logger.debug("Ignoring update for unknown paper %s", paper.id)

    def filter(self, query: str) -> list[Paper]:
        """Case-insensitive substring match on title or abstract.

        Args:
            query: Search text; empty returns every paper

        Returns:
            Matching papers in library order
        """
        if not query:
            return self.list()
        q_lower = query.lower()
        return [
            copy.deepcopy(p)
            for p in self._papers
            if q_lower in (p.title or "").lower()
            or q_lower in (p.abstract or "").lower()
        ]

    def __len__(self) -> int:
        return len(self._papers)
